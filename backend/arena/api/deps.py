"""
API依赖
当前用户识别与各处理器的依赖注入
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.exceptions import AuthenticationError
from arena.db.database import get_db
from arena.services.generation.generation_handler import GenerationHandler
from arena.services.library.library_handler import ImageLibraryHandler
from arena.services.prompt.prompt_handler import PromptHandler
from arena.services.video.video_handler import VideoHandler


async def get_current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    """
    从请求头读取当前用户（身份由上游认证网关注入）

    Raises:
        AuthenticationError: 缺少用户标识
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError()
    return x_user_id.strip()


def get_generation_handler(db: AsyncSession = Depends(get_db)) -> GenerationHandler:
    return GenerationHandler(db)


def get_library_handler(db: AsyncSession = Depends(get_db)) -> ImageLibraryHandler:
    return ImageLibraryHandler(db)


def get_prompt_handler() -> PromptHandler:
    return PromptHandler()


def get_video_handler() -> VideoHandler:
    return VideoHandler()

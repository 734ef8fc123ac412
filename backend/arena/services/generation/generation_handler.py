"""
生成业务处理器
处理生成请求的日志记录和异常转换
"""

from typing import Any, AsyncGenerator, Dict

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.exceptions import ArenaError
from arena.core.log_utils import get_logger
from arena.core.storage import get_optional_storage_service
from arena.db.database import AsyncSessionLocal
from arena.schemas.generation import CompareRequest, GenerateRequest, GenerateResponse
from arena.services.generation.generation_service import GenerationService, format_sse

logger = get_logger(__name__)


class GenerationHandler:
    """生成业务处理器"""

    def __init__(self, db: AsyncSession, service: GenerationService = None):
        self.db = db
        self.service = service or GenerationService(
            db,
            storage=get_optional_storage_service(),
            session_factory=AsyncSessionLocal
        )

    async def handle_generate(self, provider_id: str, request: GenerateRequest, user_id: str) -> Dict[str, Any]:
        """
        处理单供应商生成请求

        Returns:
            Dict[str, Any]: {success, image?, text?, tokens?, usage?}

        Raises:
            HTTPException: 校验、配额或供应商失败时抛出，状态码与错误类型对应
        """
        try:
            logger.info(
                "处理单供应商生成请求",
                operation="generate",
                provider=provider_id,
                user_id=user_id,
                prompt_length=len(request.prompt or ""),
                has_image=bool(request.image),
                enhance=request.enhance
            )
            outcome = await self.service.generate(
                user_id,
                provider_id,
                request.prompt,
                image=request.image,
                enhance=request.enhance
            )
            return GenerateResponse.from_outcome(outcome).to_body()

        except ArenaError as e:
            logger.warning(
                "单供应商生成失败",
                operation="generate",
                provider=provider_id,
                error_code=e.code,
                error=e.message
            )
            raise HTTPException(status_code=e.status_code, detail=e.message)
        except Exception as e:
            logger.error("单供应商生成出现未预期异常", exception=e, provider=provider_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e) or "Unexpected error"
            )

    async def handle_compare(self, request: CompareRequest, user_id: str) -> AsyncGenerator[str, None]:
        """
        处理多供应商对比请求

        校验与配额检查在返回事件流之前完成，失败时直接抛出HTTP异常

        Returns:
            AsyncGenerator[str, None]: SSE事件生成器
        """
        try:
            session = await self.service.start_compare(
                user_id,
                request.prompt,
                request.providers,
                image=request.image,
                enhance=request.enhance
            )
        except ArenaError as e:
            logger.warning("对比请求被拒绝", operation="compare", error_code=e.code, error=e.message)
            raise HTTPException(status_code=e.status_code, detail=e.message)

        return self._stream(session)

    async def _stream(self, session) -> AsyncGenerator[str, None]:
        try:
            async for event in self.service.stream_compare(session):
                yield event
        except Exception as e:
            # 事件流已开始，只能以错误事件结束
            logger.error("对比事件流异常", exception=e, operation="compare")
            yield format_sse("error", {"error": str(e) or "Unexpected error", "code": "STREAM_ERROR"})

    async def handle_list_images(self, user_id: str) -> Dict[str, Any]:
        """处理用户图片列表请求"""
        try:
            return await self.service.list_images(user_id)
        except Exception as e:
            logger.error("获取用户图片列表失败", exception=e, user_id=user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e) or "Unexpected error"
            )

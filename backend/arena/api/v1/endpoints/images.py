"""
用户图片库API端点
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from arena.api.deps import get_current_user_id, get_generation_handler, get_library_handler
from arena.schemas.generation import ImageListResponse, MigrateImagesRequest, MigrateImagesResponse
from arena.services.generation.generation_handler import GenerationHandler
from arena.services.library.library_handler import ImageLibraryHandler

router = APIRouter(tags=["图片库"])


@router.get(
    "",
    response_model=ImageListResponse,
    response_model_by_alias=True,
    summary="获取已生成图片",
    description="按创建时间倒序返回当前用户已完成生成的图片URL"
)
async def list_images(
    user_id: str = Depends(get_current_user_id),
    handler: GenerationHandler = Depends(get_generation_handler)
) -> Dict[str, Any]:
    return await handler.handle_list_images(user_id)


@router.post(
    "/migrate",
    response_model=MigrateImagesResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
    summary="迁移图片到自有存储桶",
    description="将当前用户已生成的图片复制到用户提供的COS存储桶 images/ 目录"
)
async def migrate_images(
    migrate_request: MigrateImagesRequest,
    user_id: str = Depends(get_current_user_id),
    handler: ImageLibraryHandler = Depends(get_library_handler)
) -> Dict[str, Any]:
    return await handler.handle_migrate(migrate_request, user_id)

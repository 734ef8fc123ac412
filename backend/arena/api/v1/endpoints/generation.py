"""
图片生成API端点
单供应商生成与多供应商并发对比
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from arena.api.deps import get_current_user_id, get_generation_handler
from arena.schemas.common import ErrorResponse
from arena.schemas.generation import CompareRequest, GenerateRequest, GenerateResponse
from arena.services.generation.generation_handler import GenerationHandler

router = APIRouter(tags=["图片生成"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


# compare 必须在 /{provider_id} 之前注册
@router.post(
    "/compare",
    response_class=StreamingResponse,
    summary="多供应商并发对比",
    description="并发调度选中的供应商，按完成顺序以Server-Sent Events推送每个分支的结果",
    responses=ERROR_RESPONSES
)
async def compare_providers(
    compare_request: CompareRequest,
    user_id: str = Depends(get_current_user_id),
    handler: GenerationHandler = Depends(get_generation_handler)
):
    """
    多供应商并发对比 - SSE实现

    事件顺序：turn（所有分支待定）-> branch（每个分支一次，完成顺序）-> done
    """
    events = await handler.handle_compare(compare_request, user_id)
    return StreamingResponse(
        events,
        media_type="text/event-stream",
        headers={
            'Cache-Control': 'no-cache',
            'Connection': 'keep-alive',
        }
    )


@router.post(
    "/{provider_id}",
    response_model=GenerateResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
    summary="单供应商生成",
    description="调用指定供应商生成图片（可附带参考图片与提示词增强）",
    responses=ERROR_RESPONSES
)
async def generate_with_provider(
    provider_id: str,
    generate_request: GenerateRequest,
    user_id: str = Depends(get_current_user_id),
    handler: GenerationHandler = Depends(get_generation_handler)
) -> Dict[str, Any]:
    """
    单供应商生成

    Args:
        provider_id: 供应商标识（image-gpt / gemini-image-flash / flux-1）
        generate_request: {prompt, image?, enhance?}
    """
    return await handler.handle_generate(provider_id, generate_request, user_id)

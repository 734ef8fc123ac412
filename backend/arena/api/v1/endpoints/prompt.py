"""
提示词API端点
"""

from typing import Dict

from fastapi import APIRouter, Depends

from arena.api.deps import get_prompt_handler
from arena.schemas.generation import PromptEnhanceRequest, PromptEnhanceResponse
from arena.services.prompt.prompt_handler import PromptHandler

router = APIRouter(tags=["提示词"])


@router.post(
    "/enhance",
    response_model=PromptEnhanceResponse,
    summary="提示词增强",
    description="使用文本模型改写文生图提示词"
)
async def enhance_prompt(
    enhance_request: PromptEnhanceRequest,
    handler: PromptHandler = Depends(get_prompt_handler)
) -> Dict[str, str]:
    return await handler.handle_enhance(enhance_request)

"""
提示词增强处理器
"""

from typing import Dict

from fastapi import HTTPException, status

from arena.core.exceptions import ArenaError, ValidationError
from arena.core.log_utils import get_logger
from arena.core.providers.enhancer import PromptEnhancer
from arena.schemas.generation import PromptEnhanceRequest

logger = get_logger(__name__)


class PromptHandler:
    """提示词增强处理器"""

    def __init__(self, enhancer: PromptEnhancer = None):
        self.enhancer = enhancer or PromptEnhancer()

    async def handle_enhance(self, request: PromptEnhanceRequest) -> Dict[str, str]:
        """
        处理提示词增强请求

        Returns:
            Dict[str, str]: {prompt}
        """
        try:
            if not request.text or not request.text.strip():
                raise ValidationError("Text is required")
            prompt = await self.enhancer.enhance_text(request.text.strip())
            logger.info("提示词增强完成", operation="enhance_prompt", input_length=len(request.text))
            return {"prompt": prompt}
        except ArenaError as e:
            logger.warning("提示词增强失败", operation="enhance_prompt", error_code=e.code, error=e.message)
            raise HTTPException(status_code=e.status_code, detail=e.message)
        except Exception as e:
            logger.error("提示词增强出现未预期异常", exception=e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e) or "Unexpected error"
            )

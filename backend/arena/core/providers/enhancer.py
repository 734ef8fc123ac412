"""
提示词增强
基于 Google GenAI 的轻量文本改写；生成调用前可选启用，失败时静默回退为原始提示词
"""

from typing import List, Optional

from google import genai

from arena.core.config import settings
from arena.core.exceptions import ConfigurationError, UpstreamError
from arena.core.log_utils import get_logger

logger = get_logger(__name__)


class PromptEnhancer:
    """提示词增强器"""

    TEXT_TO_IMAGE_INSTRUCTION = (
        "You are an expert Text to Image Prompt Enhancer. Please enhance the following prompt "
        "to make it more interesting and descriptive: {text}."
    )

    KEYWORDS_TO_VIDEO_INSTRUCTION = (
        "You are an expert video prompt engineer for Google's Veo model. Your task is to construct "
        "the most effective and optimal prompt string using the following keywords. Every single "
        "keyword MUST be included. Synthesize them into a single, cohesive, and cinematic "
        "instruction. Do not add any new core concepts. Output ONLY the final prompt string, "
        "without any introduction or explanation. Mandatory Keywords: {keywords}"
    )

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[genai.Client] = None
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model = model or settings.prompt_enhancer_model
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError("Missing GOOGLE_API_KEY")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate(self, instruction: str) -> str:
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=instruction
            )
        except Exception as e:
            raise UpstreamError(f"Prompt enhancement failed: {e}") from e

        text = (response.text or "").strip()
        if not text:
            raise UpstreamError("Prompt enhancement returned no text")
        return text

    async def enhance_text(self, text: str) -> str:
        """
        增强一段文生图提示词（失败时抛出异常）

        Raises:
            ConfigurationError: 未配置密钥
            UpstreamError: 模型调用失败或无输出
        """
        return await self._generate(self.TEXT_TO_IMAGE_INSTRUCTION.format(text=text))

    async def enhance(self, prompt: str) -> str:
        """增强提示词，任何失败都回退为原始提示词"""
        if not prompt or not prompt.strip():
            return prompt
        try:
            enhanced = await self.enhance_text(prompt)
        except Exception as e:
            logger.warning("提示词增强失败，使用原始提示词", error=str(e))
            return prompt

        logger.info(
            "提示词增强完成",
            original_length=len(prompt),
            enhanced_length=len(enhanced)
        )
        return enhanced

    async def enhance_keywords(self, keywords: List[str]) -> str:
        """将关键词合成为视频提示词，失败或无输出时回退为逗号拼接"""
        if not keywords:
            return ""
        try:
            return await self._generate(
                self.KEYWORDS_TO_VIDEO_INSTRUCTION.format(keywords=", ".join(keywords))
            )
        except Exception as e:
            logger.warning("关键词提示词合成失败，使用关键词拼接", error=str(e))
            return ", ".join(keywords)

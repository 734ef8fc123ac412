"""
Image-GPT 供应商
基于 OpenAI Responses API 的 image_generation 工具，单次请求-响应形态，可同时返回文本
"""

import base64
import binascii
from typing import Any, List, Optional, Tuple

import openai

from arena.core.config import settings
from arena.core.exceptions import UpstreamError
from arena.core.log_utils import get_logger
from arena.core.providers.base import BaseGenerationProvider
from arena.core.providers.models import InputImage, ProviderId, ProviderOutcome, TokenUsage

logger = get_logger(__name__)


class ImageGptProvider(BaseGenerationProvider):
    """Image-GPT 图片生成供应商"""

    PROVIDER_ID = ProviderId.IMAGE_GPT
    API_KEY_SETTING = "OPENAI_API_KEY"

    # 常量定义
    DEFAULT_MAX_RETRIES = 2
    OUTPUT_MIME_TYPE = "image/png"

    def __init__(self, *args, client: Optional[openai.AsyncOpenAI] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._client = client

    @property
    def model_name(self) -> str:
        return settings.image_gpt_model

    def _get_client(self) -> openai.AsyncOpenAI:
        """创建OpenAI客户端"""
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self.api_key,
                timeout=settings.provider_request_timeout,
                max_retries=self.DEFAULT_MAX_RETRIES
            )
        return self._client

    def _build_content(self, prompt: str, image: Optional[InputImage]) -> List[dict]:
        content: List[dict] = [{"type": "input_text", "text": prompt}]
        if image is not None:
            content.append({"type": "input_image", "image_url": image.data_url})
        return content

    async def _generate(self, prompt: str, image: Optional[InputImage]) -> ProviderOutcome:
        """调用 Responses API 生成图片"""
        client = self._get_client()

        logger.info(
            "调用Image-GPT生成图片",
            model=self.model_name,
            prompt_length=len(prompt),
            has_input_image=image is not None
        )

        try:
            response = await client.responses.create(
                model=self.model_name,
                input=[{"role": "user", "content": self._build_content(prompt, image)}],
                tools=[{"type": "image_generation", "size": settings.image_gpt_size}]
            )
        except openai.APIConnectionError as e:
            raise UpstreamError(f"Image-GPT connection error: {e}") from e
        except openai.RateLimitError as e:
            raise UpstreamError(f"Image-GPT rate limited: {e}", status_code=429) from e
        except openai.APIStatusError as e:
            raise UpstreamError(
                f"Image-GPT API error: {e.status_code} - {e}",
                details={"status_code": e.status_code}
            ) from e

        images, text = ImageGptResponseHandler.extract_outputs(response)
        usage = ImageGptResponseHandler.extract_usage(response)

        image_url = None
        if images:
            image_url = await self._store_image(images[0], self.OUTPUT_MIME_TYPE, index=0)

        return self._build_outcome(image_url, text, usage, image_count=len(images))


class ImageGptResponseHandler:
    """Responses API 响应解析"""

    @staticmethod
    def _decode_result(result: Any) -> Optional[bytes]:
        if isinstance(result, str):
            payload = result
        else:
            payload = getattr(result, "b64_json", None)
        if not payload:
            return None
        try:
            return base64.b64decode(payload)
        except (binascii.Error, ValueError):
            logger.warning("Image-GPT返回的图片数据无法解码")
            return None

    @classmethod
    def extract_outputs(cls, response: Any) -> Tuple[List[bytes], str]:
        """提取生成的图片（base64解码后）与输出文本"""
        images: List[bytes] = []
        text_parts: List[str] = []

        for item in getattr(response, "output", None) or []:
            item_type = getattr(item, "type", None)
            if item_type == "image_generation_call":
                data = cls._decode_result(getattr(item, "result", None))
                if data:
                    images.append(data)
            elif item_type == "message":
                for part in getattr(item, "content", None) or []:
                    if getattr(part, "type", None) == "output_text" and getattr(part, "text", None):
                        text_parts.append(part.text)
            elif item_type == "output_text" and getattr(item, "text", None):
                text_parts.append(item.text)

        return images, "".join(text_parts)

    @staticmethod
    def extract_usage(response: Any) -> Optional[TokenUsage]:
        """提取Token用量"""
        usage = getattr(response, "usage", None)
        if usage is None:
            return None
        input_tokens = getattr(usage, "input_tokens", None)
        if input_tokens is None:
            input_tokens = getattr(usage, "prompt_tokens", None)
        output_tokens = getattr(usage, "output_tokens", None)
        if output_tokens is None:
            output_tokens = getattr(usage, "completion_tokens", None)
        return TokenUsage.from_counts(input_tokens, output_tokens, getattr(usage, "total_tokens", None))

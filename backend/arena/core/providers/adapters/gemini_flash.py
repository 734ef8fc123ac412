"""
Gemini 图片生成供应商
基于 Google GenAI SDK 的流式生成：首个内联图片块胜出，文本块按顺序拼接，用量取最后携带者
"""

from typing import Any, Optional

from google import genai
from google.genai import types

from arena.core.config import settings
from arena.core.exceptions import UpstreamError
from arena.core.log_utils import get_logger
from arena.core.providers.base import BaseGenerationProvider
from arena.core.providers.models import InputImage, ProviderId, ProviderOutcome, TokenUsage
from arena.core.providers.streaming import StreamAccumulator, StreamChunk

logger = get_logger(__name__)


class GeminiFlashProvider(BaseGenerationProvider):
    """Gemini 流式图片生成供应商"""

    PROVIDER_ID = ProviderId.GEMINI
    API_KEY_SETTING = "GEMINI_API_KEY"

    RESPONSE_MODALITIES = ["IMAGE", "TEXT"]

    def __init__(self, *args, client: Optional[genai.Client] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._client = client

    @property
    def model_name(self) -> str:
        return settings.gemini_image_model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _build_contents(self, prompt: str, image: Optional[InputImage]) -> Any:
        """无输入图片时直接传字符串，否则构造文本+内联图片的用户消息"""
        if image is None:
            return prompt
        return [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=prompt),
                    types.Part.from_bytes(data=image.data, mime_type=image.mime_type),
                ],
            )
        ]

    async def _generate(self, prompt: str, image: Optional[InputImage]) -> ProviderOutcome:
        """流式调用并聚合"""
        client = self._get_client()
        config = types.GenerateContentConfig(response_modalities=self.RESPONSE_MODALITIES)

        logger.info(
            "调用Gemini流式生成",
            model=self.model_name,
            prompt_length=len(prompt),
            has_input_image=image is not None
        )

        accumulator = StreamAccumulator()
        try:
            stream = await client.aio.models.generate_content_stream(
                model=self.model_name,
                contents=self._build_contents(prompt, image),
                config=config
            )
            async for chunk in stream:
                classified = classify_chunk(chunk)
                if classified is not None:
                    accumulator.feed(classified)
        except Exception as e:
            raise UpstreamError(f"Gemini generation failed: {e}") from e

        image_url = None
        if accumulator.has_image:
            image_url = await self._store_image(
                accumulator.image_data, accumulator.image_mime_type, index=0
            )

        return self._build_outcome(
            image_url,
            accumulator.text,
            accumulator.usage,
            chunk_count=accumulator.chunk_count,
            ignored_images=accumulator.ignored_binary_count
        )


def _extract_usage(chunk: Any) -> Optional[TokenUsage]:
    usage = getattr(chunk, "usage_metadata", None)
    if usage is None:
        return None
    prompt_tokens = getattr(usage, "prompt_token_count", None)
    candidate_tokens = getattr(usage, "candidates_token_count", None)
    total_tokens = getattr(usage, "total_token_count", None)
    if prompt_tokens is None and candidate_tokens is None and total_tokens is None:
        return None
    return TokenUsage(input_tokens=prompt_tokens, output_tokens=candidate_tokens, total_tokens=total_tokens)


def classify_chunk(chunk: Any) -> Optional[StreamChunk]:
    """
    将SDK流式块分类为内联二进制块或文本增量

    Returns:
        Optional[StreamChunk]: 无候选内容的块返回None
    """
    usage = _extract_usage(chunk)
    candidates = getattr(chunk, "candidates", None) or []
    content = getattr(candidates[0], "content", None) if candidates else None
    parts = getattr(content, "parts", None) or []

    if not parts:
        return StreamChunk(usage=usage) if usage is not None else None

    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        if inline_data is not None and getattr(inline_data, "data", None):
            return StreamChunk(
                inline_data=inline_data.data,
                mime_type=getattr(inline_data, "mime_type", None) or "image/png",
                usage=usage
            )

    text = "".join(getattr(part, "text", None) or "" for part in parts)
    return StreamChunk(text=text or None, usage=usage)

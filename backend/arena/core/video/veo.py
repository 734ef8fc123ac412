"""
Veo 视频生成
基于 Google GenAI 的长任务视频生成：提交后按固定间隔轮询操作状态，完成后下载视频并上传到对象存储
"""

import asyncio
from dataclasses import dataclass, fields
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import httpx
from google import genai
from google.genai import types

from arena.core.config import settings
from arena.core.exceptions import ConfigurationError, StorageError, UpstreamError, ValidationError
from arena.core.log_utils import get_logger
from arena.core.providers.enhancer import PromptEnhancer
from arena.core.providers.image_input import normalize_input_image
from arena.core.providers.polling import PollPolicy, SleepFunc, poll_until
from arena.core.storage.base_storage import BaseStorage
from arena.core.storage.utils import build_object_key
from arena.utils.id_utils import generate_uuid

logger = get_logger(__name__)


@dataclass(frozen=True)
class VideoPromptKeywords:
    """结构化视频提示词关键词"""
    subject: Optional[str] = None
    action: Optional[str] = None
    scene: Optional[str] = None
    camera_angle: Optional[str] = None
    camera_movement: Optional[str] = None
    lens_effects: Optional[str] = None
    style: Optional[str] = None
    temporal_elements: Optional[str] = None
    sound_effects: Optional[str] = None
    dialogue: Optional[str] = None

    MANDATORY = ("subject", "action", "scene")
    OPTIONAL = (
        "camera_angle", "camera_movement", "lens_effects",
        "style", "temporal_elements", "sound_effects",
    )

    @property
    def has_any(self) -> bool:
        return any((getattr(self, f.name) or "").strip() for f in fields(self))

    def collect(self) -> List[str]:
        """按 必选 -> 可选（忽略 none）-> 对白 的顺序收集关键词"""
        keywords: List[str] = []
        for name in self.MANDATORY:
            value = (getattr(self, name) or "").strip()
            if value:
                keywords.append(value)
        for name in self.OPTIONAL:
            value = (getattr(self, name) or "").strip()
            if value and value.lower() != "none":
                keywords.append(value)
        dialogue = (self.dialogue or "").strip()
        if dialogue:
            keywords.append(dialogue)
        return keywords


def append_api_key(uri: str, api_key: str) -> str:
    """为视频下载地址附加 key 查询参数"""
    if not api_key:
        return uri
    parsed = urlparse(uri)
    query = dict(parse_qsl(parsed.query))
    query["key"] = api_key
    return urlunparse(parsed._replace(query=urlencode(query)))


def video_extension(content_type: str) -> str:
    if "quicktime" in content_type:
        return "mov"
    return "mp4"


class VeoVideoGenerator:
    """Veo 视频生成器"""

    def __init__(
        self,
        storage: Optional[BaseStorage],
        api_key: Optional[str] = None,
        enhancer: Optional[PromptEnhancer] = None,
        client: Optional[genai.Client] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        poll_policy: Optional[PollPolicy] = None,
        sleep: SleepFunc = asyncio.sleep
    ):
        self.storage = storage
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.enhancer = enhancer or PromptEnhancer(api_key=self.api_key)
        self._client = client
        self.http_client = http_client
        self.poll_policy = poll_policy or PollPolicy(
            interval=settings.veo_poll_interval_seconds,
            max_attempts=settings.veo_poll_max_attempts,
            is_terminal=lambda operation: bool(getattr(operation, "done", False))
        )
        self._sleep = sleep

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError("Missing GOOGLE_API_KEY")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def resolve_prompt(
        self,
        prompt: Optional[str],
        keywords: VideoPromptKeywords,
        enhance: bool = False
    ) -> str:
        """
        确定最终提示词：无提示词但有关键词，或要求增强且有关键词时，由关键词合成

        Raises:
            ValidationError: 最终仍没有提示词
        """
        prompt = (prompt or "").strip()
        if keywords.has_any and (not prompt or enhance):
            prompt = await self.enhancer.enhance_keywords(keywords.collect())
        if not prompt:
            raise ValidationError("Missing prompt")
        return prompt

    async def _upload_reference_image(self, image: Optional[str]) -> Optional[str]:
        """上传参考图片，任何失败都忽略"""
        if not image or self.storage is None:
            return None
        try:
            normalized = await normalize_input_image(image, self.http_client)
            key = build_object_key(settings.cos_images_prefix, normalized.mime_type)
            result = await self.storage.upload(normalized.data, key, normalized.mime_type)
            return result.url or None
        except (ValidationError, StorageError) as e:
            logger.warning("参考图片上传失败，忽略", error=str(e))
            return None

    async def _download_and_store(self, client: httpx.AsyncClient, uri: str, index: int) -> str:
        if not uri:
            raise UpstreamError("Empty video URI")
        try:
            response = await client.get(append_api_key(uri, self.api_key))
        except httpx.HTTPError as e:
            raise UpstreamError(f"Failed to fetch video: {e}") from e
        if response.status_code >= 400:
            raise UpstreamError(f"Failed to fetch video: {response.status_code} {response.reason_phrase}")

        content_type = response.headers.get("content-type") or "application/octet-stream"
        key = f"{settings.cos_videos_prefix}/{generate_uuid()}.{video_extension(content_type)}"
        if self.storage is None:
            raise ConfigurationError("没有可用的存储服务。请配置腾讯云COS存储")
        result = await self.storage.upload(response.content, key, content_type)
        logger.info("视频已上传", index=index, key=key, size=result.size)
        return result.url

    async def generate(
        self,
        prompt: Optional[str],
        keywords: Optional[VideoPromptKeywords] = None,
        image: Optional[str] = None,
        enhance: bool = False,
        number_of_videos: int = 1
    ) -> List[str]:
        """
        生成视频并返回存储URL列表

        Raises:
            ValidationError: 缺少提示词
            ConfigurationError: 缺少密钥或存储
            UpstreamError / GenerationTimeoutError: 上游失败或轮询超时
        """
        final_prompt = await self.resolve_prompt(prompt, keywords or VideoPromptKeywords(), enhance)
        client = self._get_client()

        reference_url = await self._upload_reference_image(image)
        if reference_url:
            final_prompt = f"{final_prompt}\nReference image: {reference_url}"

        logger.info("提交视频生成任务", model=settings.veo_model, number_of_videos=number_of_videos)
        try:
            operation = await client.aio.models.generate_videos(
                model=settings.veo_model,
                prompt=final_prompt,
                config=types.GenerateVideosConfig(
                    number_of_videos=number_of_videos,
                    aspect_ratio=settings.veo_aspect_ratio,
                ),
            )
        except Exception as e:
            raise UpstreamError(f"Video generation failed: {e}") from e

        current = {"operation": operation}

        async def refresh():
            current["operation"] = await client.aio.operations.get(current["operation"])
            return current["operation"]

        if not getattr(operation, "done", False):
            operation = await poll_until(refresh, self.poll_policy, sleep=self._sleep)

        videos = getattr(getattr(operation, "response", None), "generated_videos", None) or []
        if not videos:
            raise UpstreamError("No videos generated")

        owns_client = self.http_client is None
        http_client = self.http_client or httpx.AsyncClient(
            timeout=settings.provider_request_timeout, follow_redirects=True
        )
        try:
            return list(await asyncio.gather(*[
                self._download_and_store(http_client, getattr(getattr(video, "video", None), "uri", "") or "", index)
                for index, video in enumerate(videos)
            ]))
        finally:
            if owns_client:
                await http_client.aclose()

"""
生成供应商基类
定义所有供应商适配器的统一调用约定：invoke(prompt, image, enhance) -> ProviderOutcome

适配器负责：输入图片归一化、可选提示词增强、调用上游、二进制结果上传（失败回退为数据URL）、
计时，并把所有失败收敛为 Failure 结果，不向调用方抛出异常。
"""

import time
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Callable, Optional, Union

import httpx

from arena.core.config import settings
from arena.core.exceptions import ArenaError, ConfigurationError, EmptyResultError
from arena.core.log_utils import get_logger
from arena.core.mlflow_tracker import get_mlflow_tracker
from arena.core.providers.enhancer import PromptEnhancer
from arena.core.providers.image_input import normalize_input_image
from arena.core.providers.models import InputImage, ProviderId, ProviderOutcome, TokenUsage
from arena.core.providers.tracker import MLflowTracingMixin
from arena.core.storage.base_storage import BaseStorage
from arena.core.storage.utils import upload_or_inline

logger = get_logger(__name__)

ImageInput = Union[str, InputImage, None]


class BaseGenerationProvider(MLflowTracingMixin, ABC):
    """生成供应商适配器基类"""

    # 子类必须声明
    PROVIDER_ID: ProviderId
    # 供应商密钥在 Settings 中的字段名
    API_KEY_SETTING: str = ""

    def __init__(
        self,
        api_key: Optional[str] = None,
        storage: Optional[BaseStorage] = None,
        enhancer: Optional[PromptEnhancer] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.perf_counter
    ):
        """
        初始化供应商适配器

        Args:
            api_key: 供应商密钥，不传时从全局配置读取
            storage: 存储服务，None 表示结果直接以数据URL返回
            enhancer: 提示词增强器
            http_client: 可选的httpx客户端（下载输入图片、HTTP型供应商调用）
            clock: 单调时钟（秒），用于计算分支耗时
        """
        self.api_key = api_key if api_key is not None else getattr(settings, self.API_KEY_SETTING, "")
        self.storage = storage
        self.enhancer = enhancer
        self.http_client = http_client
        self.clock = clock
        self.mlflow_tracker = get_mlflow_tracker()
        self._initialize_mlflow()

    @property
    def model_name(self) -> str:
        """上游模型名称"""
        return self.PROVIDER_ID.value

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self) -> None:
        """
        校验供应商密钥

        Raises:
            ConfigurationError: 缺少密钥
        """
        if not self.is_configured:
            raise ConfigurationError(f"Missing {self.API_KEY_SETTING}")

    async def invoke(
        self,
        prompt: str,
        image: ImageInput = None,
        enhance: bool = False,
        started_at: Optional[float] = None
    ) -> ProviderOutcome:
        """
        调用供应商并返回归一化结果

        Args:
            prompt: 提示词
            image: 可选输入图片（URL、数据URL、裸base64 或已归一化的图片）
            enhance: 是否先进行提示词增强
            started_at: 分支发起时刻（clock 读数），不传时以当前时刻为准

        Returns:
            ProviderOutcome: 调用结果（失败时 kind=FAILURE，不抛出异常）
        """
        start = started_at if started_at is not None else self.clock()
        try:
            self.ensure_configured()

            if enhance and prompt and self.enhancer is not None:
                prompt = await self.enhancer.enhance(prompt)

            input_image = image if isinstance(image, InputImage) or image is None \
                else await normalize_input_image(image, self.http_client)

            outcome = await self._with_mlflow_trace(
                prompt,
                input_image is not None,
                lambda: self._generate(prompt, input_image)
            )
        except ArenaError as e:
            logger.warning(
                "供应商调用失败",
                provider=self.PROVIDER_ID.value,
                error_code=e.code,
                error=e.message
            )
            outcome = ProviderOutcome.failure(self.PROVIDER_ID, e.message, e.code, metadata=e.details)
        except Exception as e:
            logger.error(
                "供应商调用出现未预期异常",
                exception=e,
                provider=self.PROVIDER_ID.value
            )
            outcome = ProviderOutcome.failure(self.PROVIDER_ID, str(e) or type(e).__name__)

        duration_ms = int(round((self.clock() - start) * 1000))
        logger.info(
            "供应商调用结束",
            provider=self.PROVIDER_ID.value,
            success=outcome.is_success,
            duration_ms=duration_ms
        )
        return replace(outcome, duration_ms=duration_ms)

    @abstractmethod
    async def _generate(self, prompt: str, image: Optional[InputImage]) -> ProviderOutcome:
        """
        实际的上游调用（由子类实现）

        失败时抛出 ArenaError 子类（UpstreamError、GenerationTimeoutError 等）。
        """
        ...

    async def _store_image(self, data: bytes, mime_type: str, index: int = 0) -> str:
        """上传生成的图片，失败时回退为内联数据URL"""
        return await upload_or_inline(
            self.storage, data, mime_type, prefix=settings.cos_images_prefix, index=index
        )

    def _build_outcome(
        self,
        image_url: Optional[str],
        text: Optional[str],
        usage: Optional[TokenUsage] = None,
        **metadata
    ) -> ProviderOutcome:
        """
        组装成功结果；既无图片也无有效文本时视为失败

        Raises:
            EmptyResultError: 无图片且无文本
        """
        text = text if text and text.strip() else None
        if not image_url and text is None:
            raise EmptyResultError()
        return ProviderOutcome.success(
            self.PROVIDER_ID,
            image_url=image_url,
            text=text,
            usage=usage,
            metadata={"model": self.model_name, **metadata}
        )

"""
供应商适配器工厂
负责注册和创建供应商适配器实例
"""

from typing import Any, Dict, Iterable, List, Type

from arena.core.exceptions import ValidationError
from arena.core.log_utils import get_logger
from arena.core.providers.base import BaseGenerationProvider
from arena.core.providers.models import ProviderId

logger = get_logger(__name__)


class ProviderFactory:
    """供应商适配器工厂"""

    _providers: Dict[ProviderId, Type[BaseGenerationProvider]] = {}

    @classmethod
    def register_provider(cls, provider_id: ProviderId, provider_class: Type[BaseGenerationProvider]) -> None:
        """
        注册适配器

        Args:
            provider_id: 供应商标识
            provider_class: 适配器类
        """
        if provider_id in cls._providers:
            logger.warning("供应商已存在，将被覆盖", provider_id=provider_id.value)

        cls._providers[provider_id] = provider_class
        logger.debug("注册生成供应商", provider_id=provider_id.value)

    @classmethod
    def create_provider(cls, provider_id: ProviderId, **kwargs: Any) -> BaseGenerationProvider:
        """
        创建适配器实例

        Args:
            provider_id: 供应商标识
            **kwargs: 透传给适配器构造函数的依赖（storage、enhancer 等）

        Returns:
            BaseGenerationProvider: 适配器实例

        Raises:
            ValidationError: 供应商未注册
        """
        provider_class = cls._providers.get(cls.resolve_provider_id(provider_id))
        if provider_class is None:
            raise ValidationError(f"Unsupported provider: {provider_id}")
        return provider_class(**kwargs)

    @classmethod
    def create_providers(cls, provider_ids: Iterable[ProviderId], **kwargs: Any) -> List[BaseGenerationProvider]:
        """按顺序批量创建适配器，重复的标识只创建一次"""
        seen: List[ProviderId] = []
        for provider_id in provider_ids:
            if provider_id not in seen:
                seen.append(provider_id)
        return [cls.create_provider(provider_id, **kwargs) for provider_id in seen]

    @classmethod
    def get_available_providers(cls) -> Dict[ProviderId, Type[BaseGenerationProvider]]:
        """获取所有已注册的适配器"""
        return cls._providers.copy()

    @classmethod
    def is_provider_supported(cls, provider_id: ProviderId) -> bool:
        return provider_id in cls._providers

    @classmethod
    def resolve_provider_id(cls, provider_id: Any) -> ProviderId:
        """
        把请求中的供应商标识解析为 ProviderId

        Raises:
            ValidationError: 未知的供应商标识
        """
        try:
            return ProviderId(provider_id)
        except ValueError:
            raise ValidationError(f"Unsupported provider: {provider_id}")

"""
供应商注册
应用启动时注册所有生成供应商适配器
"""

from arena.core.log_utils import get_logger
from arena.core.providers.factory import ProviderFactory
from arena.core.providers.models import ProviderId

logger = get_logger(__name__)


def register_all_providers() -> None:
    """注册所有生成供应商适配器（可重复调用）"""
    from arena.core.providers.adapters.image_gpt import ImageGptProvider
    from arena.core.providers.adapters.gemini_flash import GeminiFlashProvider
    from arena.core.providers.adapters.flux import FluxProvider

    providers = [
        (ProviderId.IMAGE_GPT, ImageGptProvider),
        (ProviderId.GEMINI, GeminiFlashProvider),
        (ProviderId.FLUX, FluxProvider),
    ]

    for provider_id, provider_class in providers:
        if ProviderFactory.get_available_providers().get(provider_id) is not provider_class:
            ProviderFactory.register_provider(provider_id, provider_class)

    logger.info(
        "已注册所有生成供应商",
        operation="register_all_providers",
        provider_count=len(providers)
    )

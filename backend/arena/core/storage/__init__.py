"""
存储服务模块
提供统一的存储服务访问接口，支持多种存储适配器
"""

from typing import Optional

from arena.core.config.cos_config import get_cos_config, validate_cos_config
from arena.core.exceptions import ConfigurationError
from arena.core.storage.adapters.tencent_cos import TencentCosAdapter
from arena.core.storage.base_storage import BaseStorage
from arena.core.storage.exceptions import StorageError, UploadError, NetworkError
from arena.core.storage.factory import (
    create_adapter,
    list_available_adapters,
    register_adapter,
)
from arena.core.storage.models import UploadResult
from arena.core.storage.utils import build_object_key, to_data_url, upload_or_inline

# 自动注册腾讯云COS适配器
register_adapter(TencentCosAdapter.ADAPTER_NAME, TencentCosAdapter)


def get_storage_service(adapter_name: Optional[str] = None) -> BaseStorage:
    """
    获取存储服务实例

    Args:
        adapter_name: 适配器名称（如 'tencent_cos'），不指定则自动检测

    Returns:
        BaseStorage: 存储服务实例

    Raises:
        ConfigurationError: 当没有可用的存储服务时抛出
    """
    if adapter_name is None:
        if validate_cos_config(get_cos_config()):
            adapter_name = TencentCosAdapter.ADAPTER_NAME
        else:
            raise ConfigurationError("没有可用的存储服务。请配置腾讯云COS存储")

    return create_adapter(adapter_name)


def get_optional_storage_service() -> Optional[BaseStorage]:
    """获取存储服务实例，未配置时返回None（生成结果将回退为内联数据URL）"""
    try:
        return get_storage_service()
    except ConfigurationError:
        return None


__all__ = [
    'get_storage_service',
    'get_optional_storage_service',
    'create_adapter',
    'list_available_adapters',
    'register_adapter',
    'BaseStorage',
    'TencentCosAdapter',
    'UploadResult',
    'StorageError',
    'UploadError',
    'NetworkError',
    'build_object_key',
    'to_data_url',
    'upload_or_inline',
]

"""
腾讯云COS存储适配器
实现BaseStorage接口，提供统一的腾讯云COS存储服务
"""

import asyncio
from datetime import datetime
from functools import partial
from typing import Any, Callable, Dict, Optional, TypeVar

from qcloud_cos import CosConfig, CosS3Client

from arena.core.config.cos_config import COSConfig, get_cos_config, get_object_url, validate_cos_config
from arena.core.exceptions import ConfigurationError
from arena.core.log_utils import get_logger
from arena.core.storage.base_storage import BaseStorage
from arena.core.storage.exceptions import UploadError
from arena.core.storage.models import UploadResult

logger = get_logger(__name__)

T = TypeVar('T')


class TencentCosAdapter(BaseStorage):
    """
    腾讯云COS存储适配器

    默认使用全局配置中的存储桶；迁移场景下可传入用户自有存储桶的配置。
    """

    # 适配器名称，用于工厂模式注册
    ADAPTER_NAME: str = "tencent_cos"

    def __init__(self, config: Optional[COSConfig] = None) -> None:
        """
        初始化COS存储客户端

        Args:
            config: COS配置，不传时读取全局配置

        Raises:
            ConfigurationError: 配置不完整时抛出
        """
        self.config = config or get_cos_config()

        if not validate_cos_config(self.config):
            raise ConfigurationError("腾讯云COS配置不完整，请检查环境变量")

        self._client = self._create_client()

    def _create_client(self) -> CosS3Client:
        """创建COS客户端"""
        cos_config = CosConfig(
            Region=self.config.region,
            SecretId=self.config.secret_id,
            SecretKey=self.config.secret_key,
            Scheme=self.config.scheme,
            Timeout=self.config.timeout
        )
        return CosS3Client(cos_config)

    async def _run_in_executor(self, func: Callable[..., T], **kwargs) -> T:
        """在线程池中运行同步的SDK调用"""
        loop = asyncio.get_event_loop()
        bound_func = partial(func, **kwargs)
        return await loop.run_in_executor(None, bound_func)

    def public_url(self, key: str) -> str:
        """构建对象的公共访问URL"""
        return get_object_url(self.config, key)

    async def upload(
        self,
        data: bytes,
        key: str,
        mime_type: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> UploadResult:
        """
        上传文件到COS（带重试）

        Args:
            data: 文件数据
            key: 存储键
            mime_type: MIME类型
            metadata: 可选的元数据

        Returns:
            UploadResult: 上传结果

        Raises:
            UploadError: 重试耗尽后仍失败时抛出
        """
        upload_params: Dict[str, Any] = {
            'Bucket': self.config.bucket,
            'Key': key,
            'Body': data,
            'ContentType': mime_type
        }

        if self.config.public_read:
            upload_params['ACL'] = 'public-read'

        if metadata:
            upload_params['Metadata'] = metadata

        max_retries = self.config.max_retries

        for attempt in range(max_retries + 1):
            try:
                response = await self._run_in_executor(
                    self._client.put_object,
                    **upload_params
                )
                break
            except Exception as e:
                if attempt < max_retries:
                    await asyncio.sleep(self.config.retry_delay_base * (attempt + 1))
                    continue
                logger.error(
                    "COS上传失败，重试{retries}次后仍然失败",
                    exception=e,
                    retries=max_retries,
                    key=key
                )
                raise UploadError("上传文件失败: {}".format(str(e)), details={'key': key}) from e

        return UploadResult(
            key=key,
            url=self.public_url(key),
            size=len(data),
            mime_type=mime_type,
            bucket=self.config.bucket,
            region=self.config.region,
            etag=(response or {}).get('ETag', '').strip('"'),
            uploaded_at=datetime.now()
        )


__all__ = ['TencentCosAdapter']

"""
图片迁移服务
把用户已完成生成的图片复制到用户自有的COS存储桶（images/{文件名}），单张失败跳过
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.config import settings
from arena.core.config.cos_config import get_cos_config
from arena.core.exceptions import StorageError, ValidationError
from arena.core.log_messages import log_messages
from arena.core.log_utils import get_logger
from arena.core.storage.adapters.tencent_cos import TencentCosAdapter
from arena.core.storage.base_storage import BaseStorage
from arena.repositories.generation_record import GenerationRecordRepository

logger = get_logger(__name__)

StorageBuilder = Callable[["BucketCredentials"], BaseStorage]


@dataclass(frozen=True)
class BucketCredentials:
    """用户自有存储桶凭据"""
    bucket: str
    secret_id: str
    secret_key: str
    region: Optional[str] = None

    @classmethod
    def parse(
        cls,
        bucket: Optional[str],
        secret_id: Optional[str],
        secret_key: Optional[str],
        region: Optional[str] = None
    ) -> "BucketCredentials":
        """
        Raises:
            ValidationError: 缺少必填字段
        """
        bucket = (bucket or "").strip()
        secret_id = (secret_id or "").strip()
        secret_key = (secret_key or "").strip()
        if not bucket or not secret_id or not secret_key:
            raise ValidationError("Missing required fields")
        return cls(bucket=bucket, secret_id=secret_id, secret_key=secret_key, region=(region or "").strip() or None)


def build_user_storage(credentials: BucketCredentials) -> BaseStorage:
    """按用户凭据构建COS存储实例"""
    return TencentCosAdapter(get_cos_config(
        secret_id=credentials.secret_id,
        secret_key=credentials.secret_key,
        bucket=credentials.bucket,
        region=credentials.region,
    ))


def object_name_from_url(url: str) -> str:
    """取URL路径的最后一段作为对象名"""
    segments = [s for s in urlparse(url).path.split("/") if s]
    if segments:
        return segments[-1]
    return f"image-{int(time.time() * 1000)}.png"


class ImageMigrationService:
    """图片迁移服务"""

    def __init__(
        self,
        db: AsyncSession,
        http_client: Optional[httpx.AsyncClient] = None,
        storage_builder: StorageBuilder = build_user_storage
    ):
        self.db = db
        self.repository = GenerationRecordRepository(db)
        self.http_client = http_client
        self.storage_builder = storage_builder

    async def _copy_one(self, client: httpx.AsyncClient, storage: BaseStorage, url: str) -> bool:
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(log_messages.MIGRATION_ITEM_SKIPPED, url=url, reason=str(e))
            return False
        if response.status_code >= 400:
            logger.warning(log_messages.MIGRATION_ITEM_SKIPPED, url=url, status_code=response.status_code)
            return False

        content_type = response.headers.get("content-type") or "image/png"
        key = f"{settings.cos_images_prefix}/{object_name_from_url(url)}"
        try:
            await storage.upload(response.content, key, content_type)
        except StorageError as e:
            logger.warning(log_messages.MIGRATION_ITEM_SKIPPED, url=url, key=key, reason=e.message)
            return False
        return True

    async def migrate(self, user_id: str, credentials: BucketCredentials) -> Dict[str, Any]:
        """
        迁移用户图片

        Returns:
            Dict[str, Any]: {migrated, success} 或 {migrated: 0, message}
        """
        records = await self.repository.list_completed(user_id)
        urls = [
            record.output_image_url for record in records
            if record.output_image_url and urlparse(record.output_image_url).scheme in ("http", "https")
        ]
        if not urls:
            return {"migrated": 0, "message": "No images to migrate"}

        logger.info(log_messages.MIGRATION_START, user_id=user_id, bucket=credentials.bucket, total=len(urls))
        storage = self.storage_builder(credentials)

        owns_client = self.http_client is None
        client = self.http_client or httpx.AsyncClient(
            timeout=settings.provider_request_timeout, follow_redirects=True
        )
        migrated = 0
        try:
            for url in urls:
                if await self._copy_one(client, storage, url):
                    migrated += 1
        finally:
            if owns_client:
                await client.aclose()

        logger.info(log_messages.MIGRATION_COMPLETE, user_id=user_id, migrated=migrated, total=len(urls))
        return {"migrated": migrated, "success": True}

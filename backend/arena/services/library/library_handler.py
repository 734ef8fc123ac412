"""
图片库业务处理器
"""

from typing import Any, Dict

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.exceptions import ArenaError
from arena.core.log_utils import get_logger
from arena.schemas.generation import MigrateImagesRequest
from arena.services.library.migration_service import BucketCredentials, ImageMigrationService

logger = get_logger(__name__)


class ImageLibraryHandler:
    """图片库业务处理器"""

    def __init__(self, db: AsyncSession, service: ImageMigrationService = None):
        self.db = db
        self.service = service or ImageMigrationService(db)

    async def handle_migrate(self, request: MigrateImagesRequest, user_id: str) -> Dict[str, Any]:
        """处理图片迁移请求"""
        try:
            credentials = BucketCredentials.parse(
                request.bucket, request.secret_id, request.secret_key, request.region
            )
            return await self.service.migrate(user_id, credentials)
        except ArenaError as e:
            logger.warning("图片迁移请求失败", operation="migrate_images", error_code=e.code, error=e.message)
            raise HTTPException(status_code=e.status_code, detail=e.message)
        except Exception as e:
            logger.error("图片迁移出现未预期异常", exception=e, user_id=user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e) or "Unexpected error"
            )

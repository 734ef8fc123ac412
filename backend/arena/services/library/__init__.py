"""
用户图片库服务
"""

from .migration_service import ImageMigrationService

__all__ = ["ImageMigrationService"]

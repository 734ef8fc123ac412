"""
数据访问层
"""

from .base import BaseRepository
from .generation_record import GenerationRecordRepository

__all__ = ["BaseRepository", "GenerationRecordRepository"]

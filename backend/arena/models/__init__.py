"""
数据模型
"""

from .generation_record import GenerationRecord, GenerationStatus

__all__ = ["GenerationRecord", "GenerationStatus"]

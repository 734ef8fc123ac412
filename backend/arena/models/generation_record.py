"""
生成记录模型
对应数据库表：generations（只追加，不更新）
"""

import enum

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB

from arena.db.database import Base


class GenerationStatus(str, enum.Enum):
    """生成状态"""
    COMPLETED = "completed"
    FAILED = "failed"


class GenerationRecord(Base):
    """生成记录"""
    __tablename__ = "generations"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(String(255), nullable=False, index=True)

    prompt = Column(Text, nullable=False)
    input_image_url = Column(Text, nullable=True)
    output_image_url = Column(Text, nullable=True)
    model = Column(String(100), nullable=False)  # 供应商标识

    status = Column(String(20), nullable=False, default=GenerationStatus.COMPLETED.value)
    error = Column(Text, nullable=True)

    # 列名为 metadata，属性名避开 Base.metadata
    record_metadata = Column("metadata", JSON().with_variant(JSONB, "postgresql"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "prompt": self.prompt,
            "inputImageUrl": self.input_image_url,
            "outputImageUrl": self.output_image_url,
            "model": self.model,
            "status": self.status,
            "error": self.error,
            "metadata": self.record_metadata,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

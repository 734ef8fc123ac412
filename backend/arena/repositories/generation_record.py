"""
生成记录Repository
只追加的生成日志：插入与按用户查询已完成记录
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select

from arena.core.log_messages import log_messages
from arena.core.log_utils import get_logger
from arena.models.generation_record import GenerationRecord, GenerationStatus
from arena.repositories.base import BaseRepository

logger = get_logger(__name__)


class GenerationRecordRepository(BaseRepository):
    """生成记录数据访问"""

    @property
    def model(self):
        return GenerationRecord

    async def insert(
        self,
        user_id: str,
        prompt: str,
        model: str,
        output_image_url: Optional[str] = None,
        input_image_url: Optional[str] = None,
        status: GenerationStatus = GenerationStatus.COMPLETED,
        error: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> GenerationRecord:
        """插入一条生成记录"""
        record = await self.create(
            user_id=user_id,
            prompt=prompt,
            input_image_url=input_image_url,
            output_image_url=output_image_url,
            model=model,
            status=GenerationStatus(status).value,
            error=error,
            record_metadata=metadata,
        )
        logger.info(log_messages.GENERATION_RECORD_SAVED.format(provider_id=model),
                    record_id=record.id,
                    user_id=user_id)
        return record

    async def list_completed(self, user_id: str, limit: Optional[int] = None) -> List[GenerationRecord]:
        """按创建时间倒序获取用户已完成的记录"""
        try:
            query = (
                select(GenerationRecord)
                .filter(GenerationRecord.user_id == user_id)
                .filter(GenerationRecord.status == GenerationStatus.COMPLETED.value)
                .order_by(GenerationRecord.created_at.desc(), GenerationRecord.id.desc())
            )
            if limit is not None:
                query = query.limit(limit)

            result = await self.db.execute(query)
            records = list(result.scalars().all())

            logger.info(log_messages.DB_QUERY_SUCCESS,
                        operation_name="list_completed",
                        user_id=user_id,
                        count=len(records))
            return records

        except Exception as e:
            logger.error(log_messages.DB_QUERY_FAILED,
                         operation_name="list_completed",
                         user_id=user_id,
                         exception=e)
            raise

    async def count_completed(self, user_id: str) -> int:
        """统计用户已完成的生成次数"""
        return await self.count(user_id=user_id, status=GenerationStatus.COMPLETED.value)

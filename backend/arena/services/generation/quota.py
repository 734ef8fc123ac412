"""
配额检查
调度前统计用户已完成的生成次数，超过上限时拒绝整个请求
"""

from dataclasses import dataclass
from typing import Optional

from arena.core.config import settings
from arena.core.exceptions import QuotaExceededError
from arena.core.log_messages import log_messages
from arena.core.log_utils import get_logger
from arena.repositories.generation_record import GenerationRecordRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class QuotaStatus:
    count: int
    limit: int

    @property
    def limit_reached(self) -> bool:
        return self.count >= self.limit


class QuotaGuard:
    """按用户已完成记录数限制生成次数"""

    def __init__(self, repository: GenerationRecordRepository, limit: Optional[int] = None):
        self.repository = repository
        self.limit = limit if limit is not None else settings.generation_quota_limit

    async def status(self, user_id: str) -> QuotaStatus:
        count = await self.repository.count_completed(user_id)
        return QuotaStatus(count=count, limit=self.limit)

    async def check(self, user_id: str) -> QuotaStatus:
        """
        配额检查

        Raises:
            QuotaExceededError: 已完成次数 >= 上限
        """
        quota = await self.status(user_id)
        if quota.limit_reached:
            logger.warning(
                log_messages.QUOTA_REJECTED.format(limit=self.limit),
                user_id=user_id,
                count=quota.count
            )
            raise QuotaExceededError(limit=self.limit, count=quota.count)

        logger.info(log_messages.QUOTA_PASSED, user_id=user_id, count=quota.count, limit=self.limit)
        return quota

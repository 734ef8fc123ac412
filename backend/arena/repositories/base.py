"""
Repository基础类
定义通用的数据访问接口和方法
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Type

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.log_messages import log_messages
from arena.core.log_utils import get_logger

logger = get_logger(__name__)


class BaseRepository(ABC):
    """Repository基础类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    @abstractmethod
    def model(self) -> Type[Any]:
        """返回Repository对应的模型类"""

    def _apply_filters(self, query, filters: dict):
        for key, value in filters.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)
        return query

    async def get_by_id(self, record_id: Any) -> Optional[Any]:
        """根据ID获取单个记录"""
        try:
            query = select(self.model).filter(self.model.id == record_id)
            result = await self.db.execute(query)
            return result.scalars().first()
        except Exception as e:
            logger.error(log_messages.DB_QUERY_FAILED,
                         operation_name="get_by_id",
                         record_id=record_id,
                         model_name=self.model.__name__,
                         exception=e)
            raise

    async def create(self, **kwargs) -> Any:
        """创建新记录"""
        try:
            logger.info(log_messages.DB_UPDATE_START,
                        operation_name="create",
                        model_name=self.model.__name__,
                        fields=list(kwargs.keys()))

            instance = self.model(**kwargs)
            self.db.add(instance)
            await self.db.commit()
            await self.db.refresh(instance)

            logger.info(log_messages.DB_UPDATE_SUCCESS,
                        operation_name="create",
                        model_name=self.model.__name__,
                        record_id=instance.id)

            return instance

        except Exception as e:
            await self.db.rollback()
            logger.error(log_messages.DB_UPDATE_FAILED,
                         operation_name="create",
                         model_name=self.model.__name__,
                         exception=e)
            raise

    async def count(self, **filters) -> int:
        """统计记录数量"""
        try:
            query = self._apply_filters(
                select(func.count()).select_from(self.model), filters
            )
            result = await self.db.execute(query)
            count = result.scalar() or 0

            logger.info(log_messages.DB_QUERY_SUCCESS,
                        operation_name="count",
                        model_name=self.model.__name__,
                        filters=filters,
                        count=count)

            return count

        except Exception as e:
            logger.error(log_messages.DB_QUERY_FAILED,
                         operation_name="count",
                         model_name=self.model.__name__,
                         exception=e)
            raise

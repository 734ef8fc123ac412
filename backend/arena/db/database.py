"""
数据库配置模块
SQLAlchemy异步数据库连接配置
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, StaticPool

from arena.core.config import settings


def _engine_options(url: str) -> dict:
    # 内存SQLite需要共享同一连接，否则每个会话看到的都是空库
    if url.startswith("sqlite") and ":memory:" in url:
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"poolclass": NullPool}


# 创建异步数据库引擎
engine = create_async_engine(
    settings.async_database_url,
    echo=settings.db_echo,
    future=True,
    **_engine_options(settings.async_database_url)
)

# 创建异步会话工厂
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

# 声明性基类
Base = declarative_base()


async def get_db():
    """
    获取数据库会话依赖
    用于FastAPI依赖注入
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """按模型定义创建缺失的表"""
    # 注册模型到 Base.metadata
    from arena.models import generation_record  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """关闭数据库连接"""
    await engine.dispose()

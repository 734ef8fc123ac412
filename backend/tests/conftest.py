"""
测试配置和fixtures
为所有测试提供共享的配置和fixtures

测试环境变量必须在导入应用模块之前设置：使用内存SQLite、关闭MLflow、清空供应商与COS凭据
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENABLE_MLFLOW"] = "false"
os.environ["UNIT_TESTING"] = "true"
for _key in ("OPENAI_API_KEY", "GEMINI_API_KEY", "BFL_API_KEY", "GOOGLE_API_KEY",
             "COS_SECRET_ID", "COS_SECRET_KEY", "COS_BUCKET"):
    os.environ[_key] = ""

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from unittest.mock import AsyncMock  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402

from arena.api import deps  # noqa: E402
from arena.db.database import Base  # noqa: E402
from arena.services.generation.generation_handler import GenerationHandler  # noqa: E402
from arena.services.generation.generation_service import GenerationService  # noqa: E402
from tests.utils.fakes import FakeEnhancer, FakeStorage, RecordingSleep  # noqa: E402


@pytest.fixture
def fake_storage():
    """可用的内存存储"""
    return FakeStorage()


@pytest.fixture
def failing_storage():
    """总是上传失败的存储"""
    return FakeStorage(fail=True)


@pytest.fixture
def recording_sleep():
    """不真正等待的sleep函数"""
    return RecordingSleep()


@pytest_asyncio.fixture
async def db_session():
    """每个测试使用独立的内存数据库"""
    from arena.models import generation_record  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def generation_service():
    """不依赖数据库的生成服务：配额检查与记录写入替换为替身"""
    service = GenerationService(db=None, enhancer=FakeEnhancer(), quota_limit=10)
    service.quota_guard.check = AsyncMock()
    service.persist_outcome = AsyncMock(return_value=True)
    return service


@pytest.fixture
def client(generation_service):
    """测试客户端，处理器依赖替换为测试实例"""
    from main import app

    app.dependency_overrides[deps.get_generation_handler] = lambda: GenerationHandler(
        db=None, service=generation_service
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


# 测试标记配置
def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "integration: 集成测试")
    config.addinivalue_line("markers", "interface: 接口测试")
    config.addinivalue_line("markers", "providers: 供应商适配器测试")
    config.addinivalue_line("markers", "orchestration: 并发调度与结果归并测试")
    config.addinivalue_line("markers", "storage: 存储服务测试")
    config.addinivalue_line("markers", "database: 数据库测试")
    config.addinivalue_line("markers", "logging: 日志测试")
    config.addinivalue_line("markers", "imports: 模块导入测试")

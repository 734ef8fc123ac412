"""
模块导入测试
测试所有模块的导入是否正常
"""

import pytest


@pytest.mark.unit
@pytest.mark.imports
class TestModuleImports:
    """模块导入测试类"""

    def test_config_import(self):
        """测试配置模块导入"""
        from arena.core.config import settings
        assert settings.generation_quota_limit == 10

    def test_database_import(self):
        """测试数据库模块导入"""
        from arena.db.database import engine, AsyncSessionLocal
        assert engine is not None
        assert AsyncSessionLocal is not None

    def test_model_import(self):
        """测试生成记录模型导入"""
        from arena.models import GenerationRecord
        assert GenerationRecord.__tablename__ == "generations"

    def test_provider_registry(self):
        """测试注册后三个供应商均可创建"""
        from arena.core.providers import ProviderFactory, ProviderId, register_all_providers

        register_all_providers()

        for provider_id in ProviderId:
            assert ProviderFactory.is_provider_supported(provider_id)
            assert ProviderFactory.create_provider(provider_id.value).PROVIDER_ID == provider_id

    def test_api_imports(self):
        """测试API路由挂载到应用"""
        from main import app

        paths = set(app.openapi()["paths"])
        assert "/api/v1/generate/compare" in paths
        assert "/api/v1/generate/{provider_id}" in paths
        assert "/api/v1/images" in paths
        assert "/api/v1/images/migrate" in paths
        assert "/api/v1/prompt/enhance" in paths
        assert "/api/v1/video/veo3" in paths

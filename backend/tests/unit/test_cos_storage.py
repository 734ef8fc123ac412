"""
腾讯云COS存储适配器单元测试
"""

from unittest.mock import MagicMock, patch

import pytest

from arena.core.config.cos_config import COSConfig, get_cos_config
from arena.core.exceptions import ConfigurationError, StorageError
from arena.core.storage import TencentCosAdapter, get_optional_storage_service
from arena.core.storage.exceptions import UploadError


@pytest.mark.unit
@pytest.mark.storage
class TestTencentCosAdapter:
    """TencentCosAdapter 单元测试类"""

    @pytest.fixture
    def cos_config(self):
        return COSConfig(
            secret_id="test-secret-id",
            secret_key="test-secret-key",
            region="ap-test",
            bucket="test-bucket-125",
            max_retries=2,
            retry_delay_base=0
        )

    @pytest.fixture
    def mock_client(self):
        with patch("arena.core.storage.adapters.tencent_cos.CosS3Client") as client_class:
            client = MagicMock()
            client_class.return_value = client
            yield client

    def test_init_with_partial_config(self):
        """测试配置不完整时初始化失败"""
        with pytest.raises(ConfigurationError):
            TencentCosAdapter(COSConfig(secret_id="id", secret_key="", bucket="b"))

    def test_public_url(self, cos_config, mock_client):
        """测试公共访问URL格式"""
        adapter = TencentCosAdapter(cos_config)
        assert adapter.public_url("images/a.0.png") == \
            "https://test-bucket-125.cos.ap-test.myqcloud.com/images/a.0.png"

    @pytest.mark.asyncio
    async def test_upload_success(self, cos_config, mock_client):
        """测试上传成功返回公共URL"""
        mock_client.put_object.return_value = {"ETag": '"abc123"'}
        adapter = TencentCosAdapter(cos_config)

        result = await adapter.upload(b"data", "images/a.0.png", "image/png")

        kwargs = mock_client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "test-bucket-125"
        assert kwargs["Key"] == "images/a.0.png"
        assert kwargs["ContentType"] == "image/png"
        assert kwargs["ACL"] == "public-read"
        assert result.url.endswith("/images/a.0.png")
        assert result.size == 4
        assert result.etag == "abc123"

    @pytest.mark.asyncio
    async def test_upload_retries_then_succeeds(self, cos_config, mock_client):
        """测试上传失败后重试成功"""
        mock_client.put_object.side_effect = [RuntimeError("reset"), {"ETag": '"e"'}]
        adapter = TencentCosAdapter(cos_config)

        result = await adapter.upload(b"data", "images/a.0.png", "image/png")

        assert mock_client.put_object.call_count == 2
        assert result.etag == "e"

    @pytest.mark.asyncio
    async def test_upload_fails_after_retries(self, cos_config, mock_client):
        """测试重试耗尽后抛出上传错误"""
        mock_client.put_object.side_effect = RuntimeError("bucket gone")
        adapter = TencentCosAdapter(cos_config)

        with pytest.raises(UploadError) as exc_info:
            await adapter.upload(b"data", "images/a.0.png", "image/png")

        assert isinstance(exc_info.value, StorageError)
        assert mock_client.put_object.call_count == 3

    def test_optional_storage_without_credentials(self):
        """测试未配置COS凭据时返回None"""
        assert get_optional_storage_service() is None

    def test_cos_config_overrides(self):
        """测试显式参数覆盖全局配置"""
        config = get_cos_config("sid", "skey", "user-bucket", "ap-shanghai")
        assert config.bucket == "user-bucket"
        assert config.region == "ap-shanghai"

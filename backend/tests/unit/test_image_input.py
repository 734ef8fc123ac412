"""
输入图片归一化单元测试
"""

import base64

import httpx
import pytest

from arena.core.exceptions import ValidationError
from arena.core.providers.image_input import is_remote_url, normalize_input_image


PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


@pytest.mark.unit
@pytest.mark.providers
class TestNormalizeInputImage:
    """normalize_input_image 单元测试类"""

    @pytest.mark.asyncio
    async def test_empty_value_returns_none(self):
        """测试空值返回None"""
        assert await normalize_input_image(None) is None
        assert await normalize_input_image("") is None

    @pytest.mark.asyncio
    async def test_data_url_decoded(self):
        """测试数据URL解码出字节与MIME"""
        payload = base64.b64encode(PNG_BYTES).decode()

        image = await normalize_input_image(f"data:image/jpeg;base64,{payload}")

        assert image.data == PNG_BYTES
        assert image.mime_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_bare_base64_defaults_to_png(self):
        """测试裸base64默认 image/png"""
        image = await normalize_input_image(base64.b64encode(PNG_BYTES).decode())

        assert image.data == PNG_BYTES
        assert image.mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_remote_url_uses_response_content_type(self):
        """测试远程图片优先使用响应头的MIME"""
        def handler(request):
            return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/webp; charset=binary"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            image = await normalize_input_image("https://img.test/cat.png", client)

        assert image.data == PNG_BYTES
        assert image.mime_type == "image/webp"

    @pytest.mark.asyncio
    async def test_remote_url_mime_from_path(self):
        """测试响应头缺失时按URL路径推断MIME"""
        def handler(request):
            return httpx.Response(200, content=PNG_BYTES)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            image = await normalize_input_image("https://img.test/cat.jpg", client)

        assert image.mime_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_remote_fetch_failure(self):
        """测试远程下载失败抛出校验错误"""
        def handler(request):
            return httpx.Response(404)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ValidationError):
                await normalize_input_image("https://img.test/missing.png", client)

    @pytest.mark.asyncio
    async def test_data_url_without_payload(self):
        """测试缺少内容的数据URL"""
        with pytest.raises(ValidationError):
            await normalize_input_image("data:image/png;base64,")

    def test_is_remote_url(self):
        """测试远程地址判断"""
        assert is_remote_url("https://a.test/x.png")
        assert is_remote_url("HTTP://a.test/x.png")
        assert not is_remote_url("data:image/png;base64,AAAA")
        assert not is_remote_url(None)

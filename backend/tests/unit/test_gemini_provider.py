"""
Gemini 流式供应商单元测试
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from arena.core.providers.adapters.gemini_flash import GeminiFlashProvider, classify_chunk
from tests.utils.fakes import FakeStorage


def _chunk(parts=None, usage=None):
    candidates = [SimpleNamespace(content=SimpleNamespace(parts=parts))] if parts is not None else []
    return SimpleNamespace(candidates=candidates, usage_metadata=usage)


def _image_part(data: bytes, mime_type: str = "image/png"):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def _text_part(text: str):
    return SimpleNamespace(inline_data=None, text=text)


def _usage(prompt, candidates, total):
    return SimpleNamespace(prompt_token_count=prompt, candidates_token_count=candidates, total_token_count=total)


async def _stream(chunks):
    for chunk in chunks:
        yield chunk


@pytest.mark.unit
@pytest.mark.providers
class TestGeminiFlashProvider:
    """GeminiFlashProvider 单元测试类"""

    @staticmethod
    def _provider(chunks, storage=None):
        client = MagicMock()
        client.aio.models.generate_content_stream = AsyncMock(return_value=_stream(chunks))
        return GeminiFlashProvider(api_key="g-key", storage=storage, client=client), client

    @pytest.mark.asyncio
    async def test_first_image_wins_and_text_concatenated(self):
        """测试首个图片块胜出，文本按顺序拼接，用量取最后一块"""
        storage = FakeStorage()
        provider, _ = self._provider([
            _chunk([_text_part("Here ")]),
            _chunk([_image_part(b"first", "image/jpeg")]),
            _chunk([_image_part(b"second")]),
            _chunk([_text_part("you go")], usage=_usage(12, 1290, 1302)),
        ], storage)

        outcome = await provider.invoke("a bicycle")

        assert outcome.is_success
        assert outcome.text == "Here you go"
        assert outcome.tokens_used == 1302
        assert len(storage.uploads) == 1
        key, data, mime_type = storage.uploads[0]
        assert data == b"first"
        assert mime_type == "image/jpeg"
        assert outcome.image_url == f"https://cdn.test/{key}"

    @pytest.mark.asyncio
    async def test_prompt_only_sends_plain_contents(self):
        """测试无输入图片时直接传递提示词字符串"""
        provider, client = self._provider([_chunk([_image_part(b"x")])])

        await provider.invoke("a bicycle")

        kwargs = client.aio.models.generate_content_stream.call_args.kwargs
        assert kwargs["contents"] == "a bicycle"

    @pytest.mark.asyncio
    async def test_no_storage_inlines_image(self):
        """测试未配置存储时返回数据URL"""
        provider, _ = self._provider([_chunk([_image_part(b"hello")])])

        outcome = await provider.invoke("a bicycle")

        assert outcome.image_url == "data:image/png;base64,aGVsbG8="

    @pytest.mark.asyncio
    async def test_stream_error_becomes_failure(self):
        """测试流式调用异常被收敛为失败"""
        client = MagicMock()
        client.aio.models.generate_content_stream = AsyncMock(side_effect=RuntimeError("quota"))
        provider = GeminiFlashProvider(api_key="g-key", client=client)

        outcome = await provider.invoke("a bicycle")

        assert not outcome.is_success
        assert outcome.error_message == "Gemini generation failed: quota"

    @pytest.mark.asyncio
    async def test_empty_stream(self):
        """测试空流返回空结果失败"""
        provider, _ = self._provider([_chunk(usage=_usage(1, 0, 1))])

        outcome = await provider.invoke("a bicycle")

        assert outcome.error_code == "EMPTY_RESULT"


@pytest.mark.unit
@pytest.mark.providers
class TestClassifyChunk:
    """classify_chunk 单元测试类"""

    def test_chunk_without_candidates_or_usage(self):
        """测试既无候选也无用量的块被跳过"""
        assert classify_chunk(_chunk()) is None

    def test_usage_only_chunk(self):
        """测试仅有用量的块"""
        classified = classify_chunk(_chunk(usage=_usage(1, 2, 3)))
        assert classified.usage.total_tokens == 3
        assert not classified.is_binary

    def test_binary_chunk(self):
        """测试内联图片块"""
        classified = classify_chunk(_chunk([_image_part(b"abc", "image/webp")]))
        assert classified.is_binary
        assert classified.mime_type == "image/webp"

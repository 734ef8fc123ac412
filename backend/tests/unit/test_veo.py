"""
Veo 视频生成单元测试
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from arena.core.exceptions import ConfigurationError, GenerationTimeoutError, UpstreamError, ValidationError
from arena.core.providers.polling import PollPolicy
from arena.core.video.veo import VeoVideoGenerator, VideoPromptKeywords, append_api_key, video_extension
from tests.utils.fakes import FakeEnhancer, FakeStorage, RecordingSleep


def _operation(done, uris=()):
    videos = [SimpleNamespace(video=SimpleNamespace(uri=uri)) for uri in uris]
    return SimpleNamespace(done=done, response=SimpleNamespace(generated_videos=videos) if done else None)


def _client(initial, refreshed):
    client = MagicMock()
    client.aio.models.generate_videos = AsyncMock(return_value=initial)
    client.aio.operations.get = AsyncMock(side_effect=list(refreshed))
    return client


class VideoDownloads:
    def __init__(self, status_code=200, content_type="video/mp4"):
        self.status_code = status_code
        self.content_type = content_type
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(self.status_code, content=b"video-bytes", headers={"content-type": self.content_type})


@pytest.mark.unit
class TestVideoPromptKeywords:
    """VideoPromptKeywords 单元测试类"""

    def test_collect_order_and_none_skipped(self):
        """测试关键词顺序：必选 -> 可选（忽略none）-> 对白"""
        keywords = VideoPromptKeywords(
            subject="a cat", action="jumps", scene="rooftop",
            camera_angle="none", style="noir", dialogue="Meow!"
        )

        assert keywords.collect() == ["a cat", "jumps", "rooftop", "noir", "Meow!"]
        assert keywords.has_any

    def test_empty_keywords(self):
        """测试空关键词"""
        assert not VideoPromptKeywords(subject="  ").has_any

    def test_append_api_key(self):
        """测试下载地址附加 key 参数"""
        assert append_api_key("https://gen.test/v1/files/a:download?alt=media", "k") == \
            "https://gen.test/v1/files/a:download?alt=media&key=k"

    def test_video_extension(self):
        """测试视频扩展名"""
        assert video_extension("video/quicktime") == "mov"
        assert video_extension("video/mp4") == "mp4"
        assert video_extension("application/octet-stream") == "mp4"


@pytest.mark.unit
@pytest.mark.providers
class TestVeoVideoGenerator:
    """VeoVideoGenerator 单元测试类"""

    @staticmethod
    def _generator(client, downloads, storage=None, enhancer=None, max_attempts=60):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(downloads))
        generator = VeoVideoGenerator(
            storage=storage if storage is not None else FakeStorage(),
            api_key="g-key",
            enhancer=enhancer or FakeEnhancer(),
            client=client,
            http_client=http_client,
            poll_policy=PollPolicy(interval=10, max_attempts=max_attempts, is_terminal=lambda op: op.done),
            sleep=RecordingSleep()
        )
        return generator, http_client

    @pytest.mark.asyncio
    async def test_generate_polls_and_uploads(self):
        """测试轮询到完成后下载并上传每个视频"""
        client = _client(_operation(False), [_operation(False), _operation(True, ["https://gen.test/a", "https://gen.test/b"])])
        downloads = VideoDownloads()
        storage = FakeStorage()
        generator, http_client = self._generator(client, downloads, storage)

        async with http_client:
            urls = await generator.generate("a cat on a roof", number_of_videos=2)

        assert len(urls) == 2
        assert all(url.startswith("https://cdn.test/videos/") and url.endswith(".mp4") for url in urls)
        assert client.aio.operations.get.await_count == 2
        assert {r.url.params["key"] for r in downloads.requests} == {"g-key"}
        assert [u[2] for u in storage.uploads] == ["video/mp4", "video/mp4"]

    @pytest.mark.asyncio
    async def test_keywords_without_prompt_are_synthesized(self):
        """测试无提示词时由关键词合成"""
        enhancer = FakeEnhancer(keywords_result="A cat leaps across rooftops")
        client = _client(_operation(True, ["https://gen.test/a"]), [])
        generator, http_client = self._generator(client, VideoDownloads(), enhancer=enhancer)

        async with http_client:
            await generator.generate(None, keywords=VideoPromptKeywords(subject="cat", action="leaps"))

        assert enhancer.keyword_calls == [["cat", "leaps"]]
        assert client.aio.models.generate_videos.call_args.kwargs["prompt"] == "A cat leaps across rooftops"

    @pytest.mark.asyncio
    async def test_prompt_kept_without_enhance(self):
        """测试有提示词且未要求增强时忽略关键词"""
        enhancer = FakeEnhancer()
        client = _client(_operation(True, ["https://gen.test/a"]), [])
        generator, http_client = self._generator(client, VideoDownloads(), enhancer=enhancer)

        async with http_client:
            await generator.generate("my prompt", keywords=VideoPromptKeywords(subject="cat"))

        assert enhancer.keyword_calls == []
        assert client.aio.models.generate_videos.call_args.kwargs["prompt"] == "my prompt"

    @pytest.mark.asyncio
    async def test_missing_prompt(self):
        """测试既无提示词也无关键词"""
        generator, http_client = self._generator(_client(_operation(True), []), VideoDownloads())

        async with http_client:
            with pytest.raises(ValidationError):
                await generator.generate("  ")

    @pytest.mark.asyncio
    async def test_poll_timeout(self):
        """测试轮询超时"""
        client = _client(_operation(False), [_operation(False)] * 3)
        generator, http_client = self._generator(client, VideoDownloads(), max_attempts=3)

        async with http_client:
            with pytest.raises(GenerationTimeoutError):
                await generator.generate("a cat")

    @pytest.mark.asyncio
    async def test_no_videos_generated(self):
        """测试完成但无视频"""
        generator, http_client = self._generator(_client(_operation(True, []), []), VideoDownloads())

        async with http_client:
            with pytest.raises(UpstreamError) as exc_info:
                await generator.generate("a cat")
        assert exc_info.value.message == "No videos generated"

    @pytest.mark.asyncio
    async def test_download_failure(self):
        """测试视频下载失败"""
        client = _client(_operation(True, ["https://gen.test/a"]), [])
        generator, http_client = self._generator(client, VideoDownloads(status_code=403))

        async with http_client:
            with pytest.raises(UpstreamError):
                await generator.generate("a cat")

    @pytest.mark.asyncio
    async def test_missing_key(self):
        """测试缺少密钥"""
        generator = VeoVideoGenerator(storage=FakeStorage(), api_key="", enhancer=FakeEnhancer())

        with pytest.raises(ConfigurationError):
            await generator.generate("a cat")

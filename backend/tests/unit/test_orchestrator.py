"""
多供应商并发调度单元测试
"""

import asyncio
from unittest.mock import patch

import pytest

from arena.core.exceptions import UpstreamError, ValidationError
from arena.core.providers.models import ProviderId
from arena.services.generation.orchestrator import FanOutOrchestrator, GenerationRequest
from arena.services.generation.presentation import NO_PROVIDER_SELECTED_MESSAGE
from arena.services.generation.reducer import merge, open_assistant_turn
from tests.utils.fakes import ExplodingProvider, ScriptedProvider


@pytest.mark.unit
@pytest.mark.orchestration
class TestFanOutOrchestrator:
    """FanOutOrchestrator 单元测试类"""

    @pytest.fixture
    def orchestrator(self):
        return FanOutOrchestrator()

    @pytest.fixture
    def request_data(self):
        return GenerationRequest(prompt="a red bicycle", providers=(ProviderId.GEMINI, ProviderId.FLUX))

    @pytest.mark.asyncio
    async def test_zero_adapters_rejected_before_any_task(self, orchestrator, request_data):
        """测试未选择适配器时在创建任何任务之前失败"""
        with patch("arena.services.generation.orchestrator.asyncio.create_task") as mock_create_task:
            with pytest.raises(ValidationError) as exc_info:
                orchestrator.dispatch(request_data, [])

        mock_create_task.assert_not_called()
        assert exc_info.value.message == NO_PROVIDER_SELECTED_MESSAGE

    @pytest.mark.asyncio
    async def test_empty_prompt_rejected(self, orchestrator):
        """测试空提示词在调度前被拒绝"""
        provider = ScriptedProvider(ProviderId.GEMINI, image_url="https://a")
        with pytest.raises(ValidationError):
            orchestrator.dispatch(GenerationRequest(prompt="   "), [provider])
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_results_delivered_in_completion_order(self, orchestrator, request_data):
        """测试结果按完成顺序交付，而不是调度顺序"""
        slow = ScriptedProvider(ProviderId.GEMINI, image_url="https://cdn.test/g.png", delay=0.05)
        fast = ScriptedProvider(ProviderId.FLUX, error=UpstreamError("BFL submit failed"), delay=0.0)

        dispatch = orchestrator.dispatch(request_data, [slow, fast])
        order = [provider_id async for provider_id, _ in dispatch]

        assert order == [ProviderId.FLUX, ProviderId.GEMINI]

    @pytest.mark.asyncio
    async def test_failure_isolated_per_branch(self, orchestrator, request_data):
        """测试单个分支失败不影响其它分支"""
        ok = ScriptedProvider(ProviderId.GEMINI, image_url="https://cdn.test/g.png")
        bad = ScriptedProvider(ProviderId.FLUX, error=UpstreamError("BFL submit failed"))

        results = await orchestrator.run(request_data, [ok, bad])

        assert results[ProviderId.GEMINI].is_success
        assert results[ProviderId.GEMINI].image_url == "https://cdn.test/g.png"
        assert not results[ProviderId.FLUX].is_success
        assert results[ProviderId.FLUX].error_message == "BFL submit failed"

    @pytest.mark.asyncio
    async def test_unexpected_invoke_exception_becomes_failure(self, orchestrator, request_data):
        """测试适配器 invoke 抛出的异常被收敛为失败结果"""
        ok = ScriptedProvider(ProviderId.GEMINI, image_url="https://cdn.test/g.png")
        broken = ExplodingProvider(ProviderId.FLUX)

        results = await orchestrator.run(request_data, [ok, broken])

        assert results[ProviderId.FLUX].error_message == "boom"
        assert results[ProviderId.GEMINI].is_success

    @pytest.mark.asyncio
    async def test_wait_all_joins_every_branch(self, orchestrator, request_data):
        """测试 wait_all 等待所有分支，并按调度顺序返回"""
        a = ScriptedProvider(ProviderId.GEMINI, image_url="https://a", delay=0.02)
        b = ScriptedProvider(ProviderId.FLUX, image_url="https://b")

        dispatch = orchestrator.dispatch(request_data, [a, b])
        results = await dispatch.wait_all()

        assert list(results.keys()) == [ProviderId.GEMINI, ProviderId.FLUX]
        assert all(outcome.is_success for outcome in results.values())

    @pytest.mark.asyncio
    async def test_duplicate_adapters_dispatched_once(self, orchestrator, request_data):
        """测试同一供应商只调度一次"""
        first = ScriptedProvider(ProviderId.FLUX, image_url="https://a")
        second = ScriptedProvider(ProviderId.FLUX, image_url="https://b")

        results = await orchestrator.run(request_data, [first, second])

        assert len(results) == 1
        assert len(first.calls) == 1
        assert second.calls == []

    @pytest.mark.asyncio
    async def test_duration_measured_per_branch(self, orchestrator, request_data):
        """测试每个分支的耗时以自己的发起时刻为基准"""
        slow = ScriptedProvider(ProviderId.GEMINI, image_url="https://a", delay=0.1)
        fast = ScriptedProvider(ProviderId.FLUX, image_url="https://b")

        results = await orchestrator.run(request_data, [slow, fast])

        assert results[ProviderId.GEMINI].duration_ms >= 90
        assert results[ProviderId.FLUX].duration_ms < results[ProviderId.GEMINI].duration_ms

    @pytest.mark.asyncio
    async def test_on_settled_callback_feeds_reducer(self, orchestrator, request_data):
        """测试回调与归并配合：A 成功出图，B 失败显示错误"""
        turn = open_assistant_turn([ProviderId.GEMINI, ProviderId.FLUX])
        state = {"turn": turn}

        def on_settled(provider_id, outcome):
            state["turn"] = merge(state["turn"], provider_id, outcome)

        a = ScriptedProvider(ProviderId.GEMINI, image_url="https://cdn.test/a.png")
        b = ScriptedProvider(ProviderId.FLUX, error=UpstreamError("Generation failed"), delay=0.01)

        await orchestrator.run(request_data, [a, b], on_settled=on_settled)

        gemini, flux = state["turn"].branches
        assert gemini.image_url == "https://cdn.test/a.png"
        assert flux.text == "Generation failed"
        assert state["turn"].content is None

    @pytest.mark.asyncio
    async def test_dispatch_does_not_block_caller(self, orchestrator, request_data):
        """测试 dispatch 立即返回，分支在后台运行"""
        slow = ScriptedProvider(ProviderId.GEMINI, image_url="https://a", delay=0.05)

        dispatch = orchestrator.dispatch(request_data, [slow])

        assert not dispatch.tasks[ProviderId.GEMINI].done()
        await asyncio.wait_for(dispatch.wait_all(), timeout=1)

    @pytest.mark.asyncio
    async def test_after_settle_runs_without_consumer(self, orchestrator, request_data):
        """测试分支结束回调在分支任务内执行，无人读取结果时也会完成"""
        settled = []

        async def after_settle(provider_id, outcome):
            await asyncio.sleep(0.01)
            settled.append((provider_id, outcome.is_success))

        a = ScriptedProvider(ProviderId.GEMINI, image_url="https://a", delay=0.01)
        b = ScriptedProvider(ProviderId.FLUX, error=UpstreamError("Generation failed"))

        dispatch = orchestrator.dispatch(request_data, [a, b], after_settle=after_settle)
        await dispatch.wait_all()

        assert sorted(settled) == [(ProviderId.FLUX, False), (ProviderId.GEMINI, True)]

    @pytest.mark.asyncio
    async def test_after_settle_failure_keeps_outcome(self, orchestrator, request_data):
        """测试回调异常只记录日志，不影响分支结果"""
        async def after_settle(provider_id, outcome):
            raise RuntimeError("db down")

        a = ScriptedProvider(ProviderId.GEMINI, image_url="https://a")

        dispatch = orchestrator.dispatch(request_data, [a], after_settle=after_settle)
        results = await dispatch.wait_all()
        delivered = [item async for item in dispatch]

        assert results[ProviderId.GEMINI].image_url == "https://a"
        assert delivered == [(ProviderId.GEMINI, results[ProviderId.GEMINI])]

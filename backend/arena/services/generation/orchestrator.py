"""
多供应商并发调度
为每个选中的适配器启动一个独立的异步任务，按完成顺序逐个交付结果，同时提供整体完成的等待点
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence, Set, Tuple

from arena.core.exceptions import ValidationError
from arena.core.log_messages import log_messages
from arena.core.log_utils import get_logger
from arena.core.providers.base import BaseGenerationProvider, ImageInput
from arena.core.providers.models import ProviderId, ProviderOutcome
from arena.services.generation.presentation import NO_PROVIDER_SELECTED_MESSAGE

logger = get_logger(__name__)

SettledItem = Tuple[ProviderId, ProviderOutcome]
SettledHook = Callable[[ProviderId, ProviderOutcome], Awaitable[None]]

# 事件循环只弱引用任务，调用方丢弃句柄后分支仍需运行到结束
_running_branches: Set["asyncio.Task[ProviderOutcome]"] = set()


@dataclass(frozen=True)
class GenerationRequest:
    """一次用户提交（调度后不可变）"""
    prompt: str
    providers: Tuple[ProviderId, ...] = field(default_factory=tuple)
    image: ImageInput = None
    enhance: bool = False


class FanOutDispatch:
    """
    一次并发调度的句柄

    `async for provider_id, outcome in dispatch` 按完成顺序交付每个分支的结果；
    `await dispatch.wait_all()` 等待全部分支结束。两者可以同时使用。
    """

    def __init__(self, provider_ids: List[ProviderId]):
        self.provider_ids = provider_ids
        self.started_at: Dict[ProviderId, float] = {}
        self.tasks: Dict[ProviderId, "asyncio.Task[ProviderOutcome]"] = {}
        self._settled: "asyncio.Queue[SettledItem]" = asyncio.Queue()
        self._delivered = 0

    def __len__(self) -> int:
        return len(self.provider_ids)

    def _settle(self, provider_id: ProviderId, outcome: ProviderOutcome) -> None:
        self._settled.put_nowait((provider_id, outcome))

    def __aiter__(self) -> AsyncIterator[SettledItem]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[SettledItem]:
        while self._delivered < len(self.provider_ids):
            item = await self._settled.get()
            self._delivered += 1
            yield item

    async def wait_all(self) -> Dict[ProviderId, ProviderOutcome]:
        """等待所有分支结束，按调度顺序返回结果"""
        outcomes = await asyncio.gather(*self.tasks.values())
        return dict(zip(self.tasks.keys(), outcomes))


class FanOutOrchestrator:
    """多供应商并发调度器"""

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self.clock = clock

    @staticmethod
    def _validate(request: GenerationRequest, adapters: Sequence[BaseGenerationProvider]) -> None:
        if not adapters:
            raise ValidationError(NO_PROVIDER_SELECTED_MESSAGE)
        if not (request.prompt or "").strip():
            raise ValidationError("Prompt is required")

    async def _run_branch(
        self,
        dispatch: FanOutDispatch,
        adapter: BaseGenerationProvider,
        request: GenerationRequest,
        after_settle: Optional[SettledHook] = None
    ) -> ProviderOutcome:
        provider_id = adapter.PROVIDER_ID
        started_at = dispatch.started_at[provider_id]
        try:
            outcome = await adapter.invoke(
                request.prompt,
                request.image,
                request.enhance,
                started_at=started_at
            )
        except Exception as e:
            logger.error("供应商分支出现未捕获异常", exception=e, provider=provider_id.value)
            outcome = ProviderOutcome.failure(
                provider_id,
                str(e) or type(e).__name__,
                duration_ms=int(round((self.clock() - started_at) * 1000))
            )

        logger.info(
            log_messages.GENERATION_BRANCH_SETTLED.format(provider_id=provider_id.value),
            success=outcome.is_success,
            duration_ms=outcome.duration_ms
        )
        dispatch._settle(provider_id, outcome)

        # 在分支任务内执行，与结果是否被消费无关
        if after_settle is not None:
            try:
                await after_settle(provider_id, outcome)
            except Exception as e:
                logger.error("分支结束回调失败", exception=e, provider=provider_id.value)
        return outcome

    def dispatch(
        self,
        request: GenerationRequest,
        adapters: Sequence[BaseGenerationProvider],
        after_settle: Optional[SettledHook] = None
    ) -> FanOutDispatch:
        """
        启动并发调度（必须在事件循环中调用）

        Args:
            request: 用户请求
            adapters: 选中的适配器，同一供应商只调度一次
            after_settle: 每个分支结束后在分支任务内等待的协程回调，wait_all 会等到它完成

        Returns:
            FanOutDispatch: 调度句柄

        Raises:
            ValidationError: 未选择适配器或提示词为空（此时不会创建任何任务）
        """
        self._validate(request, adapters)

        unique: Dict[ProviderId, BaseGenerationProvider] = {}
        for adapter in adapters:
            unique.setdefault(adapter.PROVIDER_ID, adapter)

        handle = FanOutDispatch(list(unique.keys()))
        logger.info(
            log_messages.GENERATION_DISPATCH.format(provider_count=len(unique)),
            providers=[p.value for p in unique]
        )

        for provider_id, adapter in unique.items():
            handle.started_at[provider_id] = self.clock()
            handle.tasks[provider_id] = asyncio.create_task(
                self._run_branch(handle, adapter, request, after_settle),
                name=f"generate-{provider_id.value}"
            )
            _running_branches.add(handle.tasks[provider_id])
            handle.tasks[provider_id].add_done_callback(_running_branches.discard)
        return handle

    async def run(
        self,
        request: GenerationRequest,
        adapters: Sequence[BaseGenerationProvider],
        on_settled: Optional[Callable[[ProviderId, ProviderOutcome], None]] = None
    ) -> Dict[ProviderId, ProviderOutcome]:
        """调度并在每个分支结束时回调，返回全部结果"""
        handle = self.dispatch(request, adapters)
        async for provider_id, outcome in handle:
            if on_settled is not None:
                on_settled(provider_id, outcome)
        results = await handle.wait_all()
        logger.info(log_messages.GENERATION_FANOUT_COMPLETE, provider_count=len(results))
        return results

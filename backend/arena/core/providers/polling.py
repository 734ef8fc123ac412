"""
轮询策略
提交-轮询型供应商使用的有界重试策略（间隔、最大次数、终态判定）
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from arena.core.exceptions import GenerationTimeoutError
from arena.core.log_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class PollPolicy(Generic[T]):
    """
    轮询策略

    Attributes:
        interval: 两次轮询之间的等待秒数
        max_attempts: 最大轮询次数
        is_terminal: 判断轮询结果是否已到达终态
    """
    interval: float
    max_attempts: int
    is_terminal: Callable[[T], bool]

    @property
    def max_wait_seconds(self) -> float:
        return self.interval * self.max_attempts


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    policy: PollPolicy[T],
    sleep: SleepFunc = asyncio.sleep
) -> T:
    """
    按策略轮询直到终态

    每次轮询前先等待一个间隔；fetch 抛出的异常直接向上传播。

    Args:
        fetch: 获取当前状态的协程函数
        policy: 轮询策略
        sleep: 等待函数（测试中可替换为假时钟）

    Returns:
        T: 第一个到达终态的轮询结果

    Raises:
        GenerationTimeoutError: 次数耗尽仍未到达终态
    """
    for attempt in range(1, policy.max_attempts + 1):
        await sleep(policy.interval)
        state = await fetch()
        if policy.is_terminal(state):
            logger.debug("轮询到达终态", attempt=attempt)
            return state

    logger.warning(
        "轮询次数耗尽仍未到达终态",
        max_attempts=policy.max_attempts,
        interval=policy.interval
    )
    raise GenerationTimeoutError(
        "Generation timed out",
        details={"attempts": policy.max_attempts, "interval": policy.interval}
    )

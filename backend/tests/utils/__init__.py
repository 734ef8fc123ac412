"""
测试工具包
提供统一的测试替身和辅助函数
"""

from .fakes import (
    ExplodingProvider,
    FakeClock,
    FakeEnhancer,
    FakeStorage,
    RecordingSleep,
    ScriptedProvider,
)

__all__ = [
    'ExplodingProvider',
    'FakeClock',
    'FakeEnhancer',
    'FakeStorage',
    'RecordingSleep',
    'ScriptedProvider',
]

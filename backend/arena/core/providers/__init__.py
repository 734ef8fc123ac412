"""
生成供应商模块
提供统一的供应商调用约定和多种供应商适配器实现
"""

from .models import InputImage, OutcomeKind, ProviderId, ProviderOutcome, TokenUsage
from .base import BaseGenerationProvider
from .factory import ProviderFactory
from .registry import register_all_providers

__all__ = [
    "InputImage",
    "OutcomeKind",
    "ProviderId",
    "ProviderOutcome",
    "TokenUsage",
    "BaseGenerationProvider",
    "ProviderFactory",
    "register_all_providers",
]

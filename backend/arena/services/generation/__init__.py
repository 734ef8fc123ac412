"""
生成服务
多供应商并发调度、结果归并、展示状态与配额检查
"""

from .conversation import Branch, ConversationTurn, RequestDraft, Role, Vote
from .orchestrator import FanOutOrchestrator, GenerationRequest
from .quota import QuotaGuard
from .reducer import merge, open_assistant_turn, user_turn

__all__ = [
    "Branch",
    "ConversationTurn",
    "RequestDraft",
    "Role",
    "Vote",
    "FanOutOrchestrator",
    "GenerationRequest",
    "QuotaGuard",
    "merge",
    "open_assistant_turn",
    "user_turn",
]

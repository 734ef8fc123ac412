"""
会话数据结构
轮次（ConversationTurn）与分支（Branch）均为不可变对象，状态变化通过构造新对象完成
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from arena.core.providers.models import ProviderId

DEFAULT_PROVIDERS: Tuple[ProviderId, ...] = (
    ProviderId.IMAGE_GPT,
    ProviderId.GEMINI,
    ProviderId.FLUX,
)


class Role(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Vote(str, enum.Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class Branch:
    """
    助手轮次中某个供应商的结果槽位

    创建时为空（待定），供应商结果到达时写入一次，之后只会被用户的投票操作修改。
    settled 用于区分"尚未返回"与"已返回但为空"。
    """
    label: ProviderId
    image_url: Optional[str] = None
    text: Optional[str] = None
    vote: Optional[Vote] = None
    duration_ms: Optional[int] = None
    tokens_used: Optional[int] = None
    settled: bool = False
    failed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label.value,
            "imageUrl": self.image_url,
            "text": self.text,
            "vote": self.vote.value if self.vote else None,
            "durationMs": self.duration_ms,
            "tokensUsed": self.tokens_used,
            "settled": self.settled,
            "failed": self.failed,
        }


@dataclass(frozen=True)
class ConversationTurn:
    """会话轮次：用户轮次只有正文，助手轮次为每个已调度供应商保留一个分支"""
    id: str
    role: Role
    content: Optional[str] = None
    branches: Tuple[Branch, ...] = field(default_factory=tuple)
    image: Optional[str] = None

    @property
    def is_settled(self) -> bool:
        """所有分支均已返回"""
        return all(branch.settled for branch in self.branches)

    def find_branch(self, provider_id: ProviderId) -> Optional[Branch]:
        for branch in self.branches:
            if branch.label == provider_id:
                return branch
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "image": self.image,
            "branches": [branch.to_dict() for branch in self.branches],
        }


@dataclass(frozen=True)
class RequestDraft:
    """待提交的请求草稿（复用结果作为下一次输入时生成）"""
    prompt: str = ""
    image: Optional[str] = None
    enhance: bool = False
    providers: Tuple[ProviderId, ...] = DEFAULT_PROVIDERS

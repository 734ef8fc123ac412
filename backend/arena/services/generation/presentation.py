"""
展示状态协调
根据轮次快照计算每个分支的渲染状态，并提供投票、复用为输入等用户操作以及会话状态管理
"""

import enum
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple

from arena.core.config import settings
from arena.core.exceptions import ValidationError
from arena.core.providers.models import ProviderId, ProviderOutcome
from arena.services.generation.conversation import (
    Branch,
    ConversationTurn,
    RequestDraft,
    Role,
    Vote,
)
from arena.services.generation.reducer import merge, open_assistant_turn, user_turn

NO_PROVIDER_SELECTED_MESSAGE = "Select at least one model"


class BranchState(str, enum.Enum):
    """分支渲染状态"""
    PENDING = "pending"
    RESOLVED_WITH_IMAGE = "resolved-with-image"
    RESOLVED_TEXT_ONLY = "resolved-text-only"
    FAILED = "failed"
    RESOLVED_EMPTY = "resolved-empty"


class BranchAction(str, enum.Enum):
    REUSE_AS_INPUT = "reuse-as-input"
    DOWNLOAD = "download"
    VOTE = "vote"


def branch_state(branch: Branch) -> BranchState:
    if not branch.settled and not branch.image_url and not branch.text:
        return BranchState.PENDING
    if branch.image_url:
        return BranchState.RESOLVED_WITH_IMAGE
    if branch.failed and branch.text:
        return BranchState.FAILED
    if branch.text:
        return BranchState.RESOLVED_TEXT_ONLY
    return BranchState.RESOLVED_EMPTY


@dataclass(frozen=True)
class BranchView:
    """单个分支的视图模型"""
    label: str
    state: BranchState
    image_url: Optional[str] = None
    text: Optional[str] = None
    vote: Optional[Vote] = None
    caption: str = ""
    placeholder_size: Optional[Tuple[int, int]] = None
    actions: Tuple[BranchAction, ...] = ()

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "state": self.state.value,
            "imageUrl": self.image_url,
            "text": self.text,
            "vote": self.vote.value if self.vote else None,
            "caption": self.caption,
            "placeholderSize": list(self.placeholder_size) if self.placeholder_size else None,
            "actions": [action.value for action in self.actions],
        }


@dataclass(frozen=True)
class TurnView:
    """轮次视图模型：正文 + 可见分支"""
    id: str
    role: Role
    content: Optional[str]
    branches: Tuple[BranchView, ...] = ()
    in_progress: bool = False


def _placeholder_size() -> Tuple[int, int]:
    width, _, height = settings.image_gpt_size.partition("x")
    try:
        return int(width), int(height)
    except ValueError:
        return 1024, 1024


def _caption(branch: Branch) -> str:
    parts = [branch.label.label]
    if branch.duration_ms is not None:
        parts.append(f"{branch.duration_ms / 1000:.1f}s")
    if branch.tokens_used is not None:
        parts.append(f"{branch.tokens_used} token")
    return " · ".join(parts)


def render_branch(branch: Branch) -> Optional[BranchView]:
    """
    计算分支视图

    Returns:
        BranchView: 视图模型；纯文本分支由轮次正文展示、空结果分支隐藏，两者均返回 None
    """
    state = branch_state(branch)
    if state in (BranchState.RESOLVED_TEXT_ONLY, BranchState.RESOLVED_EMPTY):
        return None

    if state == BranchState.PENDING:
        return BranchView(
            label=branch.label.label,
            state=state,
            caption=branch.label.label,
            placeholder_size=_placeholder_size(),
        )

    if state == BranchState.FAILED:
        return BranchView(
            label=branch.label.label,
            state=state,
            text=branch.text,
            caption=_caption(branch),
        )

    return BranchView(
        label=branch.label.label,
        state=state,
        image_url=branch.image_url,
        vote=branch.vote,
        caption=_caption(branch),
        actions=(BranchAction.REUSE_AS_INPUT, BranchAction.DOWNLOAD, BranchAction.VOTE),
    )


def render_turn(turn: ConversationTurn) -> TurnView:
    """计算轮次视图"""
    views = tuple(view for view in (render_branch(b) for b in turn.branches) if view is not None)
    return TurnView(
        id=turn.id,
        role=turn.role,
        content=turn.content,
        branches=views,
        in_progress=turn.role == Role.ASSISTANT and not turn.is_settled,
    )


def toggle_vote(turn: ConversationTurn, provider_id: ProviderId, vote: Vote) -> ConversationTurn:
    """投票：重复投同一票时取消，否则覆盖"""
    vote = Vote(vote)
    branches = tuple(
        replace(b, vote=None if b.vote == vote else vote) if b.label == provider_id else b
        for b in turn.branches
    )
    if branches == turn.branches:
        return turn
    return replace(turn, branches=branches)


def reuse_as_input(branch: Branch, draft: Optional[RequestDraft] = None) -> RequestDraft:
    """
    把分支图片作为下一次请求的输入图片

    Raises:
        ValidationError: 分支没有图片
    """
    if not branch.image_url:
        raise ValidationError("Branch has no image to reuse")
    return replace(draft or RequestDraft(), image=branch.image_url)


def validate_selection(providers: Iterable[ProviderId]) -> Tuple[ProviderId, ...]:
    """
    校验供应商选择

    Raises:
        ValidationError: 未选择任何供应商
    """
    selected = tuple(dict.fromkeys(ProviderId(p) for p in providers))
    if not selected:
        raise ValidationError(NO_PROVIDER_SELECTED_MESSAGE)
    return selected


@dataclass
class ConversationState:
    """
    会话状态：有序轮次列表

    只通过 merge 更新；结果按 (轮次, 分支) 定位，过期轮次的迟到结果不会影响新轮次。
    """
    turns: List[ConversationTurn] = field(default_factory=list)
    error: Optional[str] = None

    def submit(self, draft: RequestDraft) -> Tuple[ConversationTurn, Optional[ConversationTurn]]:
        """
        提交请求：追加用户轮次；供应商选择合法时再追加待定的助手轮次

        Returns:
            (用户轮次, 助手轮次或 None)
        """
        self.error = None
        user = user_turn(draft.prompt, image=draft.image)
        self.turns.append(user)
        try:
            providers = validate_selection(draft.providers)
        except ValidationError as e:
            self.error = e.message
            return user, None
        assistant = open_assistant_turn(providers)
        self.turns.append(assistant)
        return user, assistant

    def reject(self, message: str) -> None:
        """整个请求被拒绝：只显示错误横幅，不修改轮次"""
        self.error = message

    def get(self, turn_id: str) -> Optional[ConversationTurn]:
        return next((t for t in self.turns if t.id == turn_id), None)

    def apply(self, turn_id: str, provider_id: ProviderId, outcome: ProviderOutcome) -> bool:
        """
        把供应商结果路由到指定轮次

        Returns:
            bool: 是否产生了变化（未知轮次或分支返回 False）
        """
        for index, turn in enumerate(self.turns):
            if turn.id != turn_id:
                continue
            merged = merge(turn, provider_id, outcome)
            if merged is turn:
                return False
            self.turns[index] = merged
            return True
        return False

    def vote(self, turn_id: str, provider_id: ProviderId, vote: Vote) -> None:
        for index, turn in enumerate(self.turns):
            if turn.id == turn_id:
                self.turns[index] = toggle_vote(turn, provider_id, vote)
                return

    def render(self) -> List[TurnView]:
        return [render_turn(turn) for turn in self.turns]

"""
增量结果归并
纯函数：把单个供应商结果合并进助手轮次，其它分支原样保留
"""

from dataclasses import replace
from typing import Iterable, Optional

from arena.core.providers.models import ProviderId, ProviderOutcome
from arena.services.generation.conversation import Branch, ConversationTurn, Role
from arena.utils.id_utils import generate_turn_id


def user_turn(content: str, image: Optional[str] = None, turn_id: Optional[str] = None) -> ConversationTurn:
    """创建用户轮次"""
    return ConversationTurn(id=turn_id or generate_turn_id(), role=Role.USER, content=content, image=image)


def open_assistant_turn(providers: Iterable[ProviderId], turn_id: Optional[str] = None) -> ConversationTurn:
    """为每个已调度的供应商创建一个空分支"""
    seen = []
    for provider_id in providers:
        provider_id = ProviderId(provider_id)
        if provider_id not in seen:
            seen.append(provider_id)
    return ConversationTurn(
        id=turn_id or generate_turn_id(),
        role=Role.ASSISTANT,
        branches=tuple(Branch(label=provider_id) for provider_id in seen),
    )


def _apply_outcome(branch: Branch, outcome: ProviderOutcome) -> Branch:
    if outcome.is_success:
        return replace(
            branch,
            image_url=outcome.image_url,
            text=outcome.text,
            duration_ms=outcome.duration_ms,
            tokens_used=outcome.tokens_used,
            settled=True,
            failed=False,
        )
    # 失败时用错误信息替代分支内容
    return replace(
        branch,
        image_url=None,
        text=outcome.error_message,
        duration_ms=outcome.duration_ms,
        tokens_used=None,
        settled=True,
        failed=True,
    )


def merge(turn: ConversationTurn, provider_id: ProviderId, outcome: ProviderOutcome) -> ConversationTurn:
    """
    把供应商结果合并进轮次

    Args:
        turn: 当前轮次
        provider_id: 结果所属的供应商
        outcome: 供应商结果

    Returns:
        ConversationTurn: 新轮次；找不到对应分支时原样返回
    """
    try:
        provider_id = ProviderId(provider_id)
    except ValueError:
        return turn

    index = next((i for i, branch in enumerate(turn.branches) if branch.label == provider_id), None)
    if index is None:
        return turn

    updated = _apply_outcome(turn.branches[index], outcome)
    branches = turn.branches[:index] + (updated,) + turn.branches[index + 1:]

    content = turn.content
    # 文本型供应商的文本同时提升到轮次正文，后到者覆盖先到者
    if provider_id.is_text_centric and updated.text:
        content = updated.text

    if branches == turn.branches and content == turn.content:
        return turn
    return replace(turn, branches=branches, content=content)

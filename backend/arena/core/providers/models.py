"""
供应商数据模型
定义供应商标识、输入图片和统一的调用结果结构
"""

import base64
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class ProviderId(str, enum.Enum):
    """供应商标识（每个标识对应唯一一个适配器）"""
    IMAGE_GPT = "image-gpt"
    GEMINI = "gemini-image-flash"
    FLUX = "flux-1"

    @property
    def label(self) -> str:
        """界面展示名称"""
        return _PROVIDER_LABELS[self]

    @property
    def is_text_centric(self) -> bool:
        """是否为文本型供应商（其文本会被提升到轮次正文）"""
        return self in TEXT_CENTRIC_PROVIDERS


_PROVIDER_LABELS = {
    ProviderId.IMAGE_GPT: "Image-GPT",
    ProviderId.GEMINI: "Gemini",
    ProviderId.FLUX: "Flux-1",
}

TEXT_CENTRIC_PROVIDERS = frozenset({ProviderId.IMAGE_GPT})


class OutcomeKind(str, enum.Enum):
    """调用结果类型"""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class TokenUsage:
    """Token用量"""
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    @classmethod
    def from_counts(
        cls,
        input_tokens: Optional[int],
        output_tokens: Optional[int],
        total_tokens: Optional[int] = None
    ) -> "TokenUsage":
        """构建用量，缺少总数时由输入与输出相加得到"""
        if total_tokens is None and input_tokens is not None and output_tokens is not None:
            total_tokens = input_tokens + output_tokens
        return cls(input_tokens=input_tokens, output_tokens=output_tokens, total_tokens=total_tokens)

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass(frozen=True)
class InputImage:
    """归一化后的输入图片：原始字节 + MIME类型"""
    data: bytes
    mime_type: str = "image/png"

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


@dataclass(frozen=True)
class ProviderOutcome:
    """
    单个供应商一次调用的最终结果（构造后不可变）

    Attributes:
        provider_id: 供应商标识
        kind: 成功或失败
        image_url: 图片URL（存储URL或内联数据URL）
        text: 供应商返回的文本
        tokens_used: Token总数
        duration_ms: 从该分支发起到结束的耗时（毫秒）
        error_message: 失败时的可读错误信息
        error_code: 失败时的错误码
        usage: Token用量明细
    """
    provider_id: ProviderId
    kind: OutcomeKind
    image_url: Optional[str] = None
    text: Optional[str] = None
    tokens_used: Optional[int] = None
    duration_ms: int = 0
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    usage: Optional[TokenUsage] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_success(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @classmethod
    def success(
        cls,
        provider_id: ProviderId,
        image_url: Optional[str] = None,
        text: Optional[str] = None,
        usage: Optional[TokenUsage] = None,
        duration_ms: int = 0,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "ProviderOutcome":
        return cls(
            provider_id=provider_id,
            kind=OutcomeKind.SUCCESS,
            image_url=image_url,
            text=text,
            tokens_used=usage.total_tokens if usage else None,
            duration_ms=duration_ms,
            usage=usage,
            metadata=metadata or {},
        )

    @classmethod
    def failure(
        cls,
        provider_id: ProviderId,
        error_message: str,
        error_code: str = "UPSTREAM_ERROR",
        duration_ms: int = 0,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "ProviderOutcome":
        return cls(
            provider_id=provider_id,
            kind=OutcomeKind.FAILURE,
            error_message=error_message,
            error_code=error_code,
            duration_ms=duration_ms,
            metadata=metadata or {},
        )

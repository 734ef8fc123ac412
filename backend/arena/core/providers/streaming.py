"""
流式响应聚合
将供应商的多块流式响应收敛为单个终态结果
"""

from dataclasses import dataclass
from typing import List, Optional

from arena.core.providers.models import TokenUsage


@dataclass(frozen=True)
class StreamChunk:
    """
    已分类的流式块

    inline_data 非空时视为内联二进制块，否则 text 视为文本增量；
    usage 可出现在任意块上（通常是最后一块）。
    """
    inline_data: Optional[bytes] = None
    mime_type: Optional[str] = None
    text: Optional[str] = None
    usage: Optional[TokenUsage] = None

    @property
    def is_binary(self) -> bool:
        return self.inline_data is not None


class StreamAccumulator:
    """流式块聚合器：首个二进制块胜出，文本按到达顺序拼接，用量取最后携带者"""

    def __init__(self) -> None:
        self.image_data: Optional[bytes] = None
        self.image_mime_type: Optional[str] = None
        self.usage: Optional[TokenUsage] = None
        self._text_parts: List[str] = []
        self.chunk_count = 0
        self.ignored_binary_count = 0

    def feed(self, chunk: StreamChunk) -> None:
        """处理一个流式块"""
        self.chunk_count += 1
        if chunk.usage is not None:
            self.usage = chunk.usage

        if chunk.is_binary:
            if self.image_data is None:
                self.image_data = chunk.inline_data
                self.image_mime_type = chunk.mime_type or "image/png"
            else:
                self.ignored_binary_count += 1
            return

        if chunk.text:
            self._text_parts.append(chunk.text)

    @property
    def text(self) -> str:
        return "".join(self._text_parts)

    @property
    def has_image(self) -> bool:
        return self.image_data is not None

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())

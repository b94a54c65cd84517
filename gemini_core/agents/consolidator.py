"""响应合并。

流式接口会返回多个片段，这里负责把一批片段合并成一个结果：
按到达顺序扫描，遇到第一个带 error 的片段立即抛出 ServiceError，
本批次的任何 Turn 都不会写入历史；否则把每个非空候选作为 model Turn
暂存，整批通过后一次性提交。
"""

from typing import Iterator, List, Optional, Sequence, Tuple

from gemini_core.domain.conversation import ConversationState
from gemini_core.domain.exceptions import ServiceError
from gemini_core.domain.models import (
    Content,
    ContentResponse,
    FunctionCall,
    FunctionCallPart,
    InlineDataPart,
    TextPart,
    UsageMetadata,
    iter_parts,
)


class Responses:
    """一批无错误片段的只读包装，提供文本/图像等便捷访问。"""

    def __init__(self, fragments: Sequence[ContentResponse]):
        self._fragments = list(fragments)

    @property
    def fragments(self) -> List[ContentResponse]:
        return list(self._fragments)

    def __len__(self) -> int:
        return len(self._fragments)

    def __iter__(self) -> Iterator[ContentResponse]:
        return iter(self._fragments)

    def text(self) -> Optional[str]:
        """把所有文本 part 拼接为一个字符串，没有文本时返回 None。"""

        text = "".join(p.text for p in iter_parts(self._fragments) if isinstance(p, TextPart))
        return text or None

    def images(self) -> List[Tuple[str, str]]:
        """返回 (mime_type, base64 数据) 列表。"""

        return [
            (p.inline_data.mime_type, p.inline_data.data)
            for p in iter_parts(self._fragments)
            if isinstance(p, InlineDataPart)
        ]

    def function_calls(self) -> List[FunctionCall]:
        return [p.function_call for p in iter_parts(self._fragments) if isinstance(p, FunctionCallPart)]

    def usage(self) -> Optional[UsageMetadata]:
        for fragment in reversed(self._fragments):
            if fragment.usage_metadata is not None:
                return fragment.usage_metadata
        return None


def consolidate(batch: Sequence[ContentResponse], state: ConversationState) -> Responses:
    success: List[ContentResponse] = []
    for fragment in batch:
        if fragment.error is not None:
            state.discard()
            raise ServiceError.from_payload(fragment.error)
        for candidate in fragment.candidates:
            content = candidate.content
            if content.parts:
                state.stage(Content(parts=content.parts, role="model"))
        success.append(fragment)
    state.commit()
    return Responses(success)

"""对话内容数据模型。

本模块定义会话历史与响应片段共享的数据结构：

- Part: 一个 Content 中的单个片段，是一个封闭的变体集合
  （文本、内联二进制、文件引用、工具调用、工具结果、代码、代码执行结果、thought 标记）。
- Content: 一轮对话（Turn），由有序的 Part 列表和角色组成，追加到历史后不可变。
- Candidate / ContentResponse: 流式响应中的一个候选与一个片段。

与 JSON 之间的转换集中在 codec 模块，这里只描述结构。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Literal, Optional, Sequence, Tuple, Union


# 会话角色：user 表示调用方（包括工具结果），model 表示模型输出
Role = Literal["user", "model"]


@dataclass(frozen=True)
class Blob:
    """内联二进制数据，data 为 Base64 字符串。"""

    mime_type: str
    data: str


@dataclass(frozen=True)
class FileData:
    """通过 URI 引用的文件。"""

    mime_type: str
    file_uri: str


@dataclass(frozen=True)
class FunctionCall:
    """模型发起的一次工具调用（待执行）。"""

    name: str
    id: Optional[str] = None
    args: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class FunctionResponse:
    """工具执行后的结果，由 driver 构造并以 user 角色回传给模型。"""

    name: str
    response: Dict[str, Any]
    id: Optional[str] = None


@dataclass(frozen=True)
class ExecutableCode:
    language: str
    code: str


@dataclass(frozen=True)
class CodeExecutionResult:
    outcome: str
    output: str = ""


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class InlineDataPart:
    inline_data: Blob


@dataclass(frozen=True)
class FileDataPart:
    file_data: FileData


@dataclass(frozen=True)
class FunctionCallPart:
    function_call: FunctionCall


@dataclass(frozen=True)
class FunctionResponsePart:
    function_response: FunctionResponse


@dataclass(frozen=True)
class ExecutableCodePart:
    executable_code: ExecutableCode


@dataclass(frozen=True)
class CodeExecutionResultPart:
    code_execution_result: CodeExecutionResult


@dataclass(frozen=True)
class ThoughtPart:
    """thought 标记；部分模型会在同一个 part 中附带思考文本。"""

    thought: bool = True
    text: Optional[str] = None


@dataclass(frozen=True)
class UnknownPart:
    """无法识别的 part，原样保留并在下次请求时原样发送。"""

    raw: Dict[str, Any]


Part = Union[
    TextPart,
    InlineDataPart,
    FileDataPart,
    FunctionCallPart,
    FunctionResponsePart,
    ExecutableCodePart,
    CodeExecutionResultPart,
    ThoughtPart,
    UnknownPart,
]


@dataclass(frozen=True)
class Content:
    """一轮对话。

    parts 在构造时被转换为 tuple，保证追加到历史后不会被就地修改。
    """

    parts: Tuple[Part, ...] = ()
    role: Role = "user"

    def __post_init__(self) -> None:
        object.__setattr__(self, "parts", tuple(self.parts))

    @classmethod
    def user(cls, *parts: Part) -> "Content":
        return cls(parts=parts, role="user")

    @classmethod
    def model(cls, *parts: Part) -> "Content":
        return cls(parts=parts, role="model")

    @classmethod
    def from_text(cls, text: str, role: Role = "user") -> "Content":
        return cls(parts=(TextPart(text),), role=role)

    @property
    def function_calls(self) -> List[FunctionCall]:
        return [p.function_call for p in self.parts if isinstance(p, FunctionCallPart)]

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))


@dataclass
class UsageMetadata:
    """token 统计（字段均可能缺失）。"""

    prompt_token_count: Optional[int] = None
    cached_content_token_count: Optional[int] = None
    candidates_token_count: Optional[int] = None
    tool_use_prompt_token_count: Optional[int] = None
    thoughts_token_count: Optional[int] = None
    total_token_count: Optional[int] = None


@dataclass
class PromptFeedback:
    block_reason: Optional[str] = None
    safety_ratings: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class Candidate:
    """单个候选回答及其元数据。"""

    content: Content = field(default_factory=lambda: Content(role="model"))
    finish_reason: Optional[str] = None
    safety_ratings: List[Dict[str, Any]] = field(default_factory=list)
    citation_metadata: Optional[Dict[str, Any]] = None
    grounding_metadata: Optional[Dict[str, Any]] = None
    avg_logprobs: Optional[float] = None
    index: Optional[int] = None
    token_count: Optional[int] = None


@dataclass
class ContentResponse:
    """流式响应中的一个片段。

    error 存在时该片段不携带可用的候选内容，整批响应都要短路处理。
    """

    candidates: List[Candidate] = field(default_factory=list)
    prompt_feedback: Optional[PromptFeedback] = None
    usage_metadata: Optional[UsageMetadata] = None
    model_version: Optional[str] = None
    error: Optional[Dict[str, Any]] = None


def iter_parts(batch: Sequence[ContentResponse]) -> Iterator[Part]:
    """按到达顺序遍历一批片段中所有候选的全部 part。"""

    for fragment in batch:
        for candidate in fragment.candidates:
            yield from candidate.content.parts

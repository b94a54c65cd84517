"""dataclass 与接口 JSON（camelCase）之间的转换。

- to_wire: 把请求/历史对象转换为可直接 json.dumps 的 dict，
  None 与空列表/空字典字段会被省略。
- content_from_wire / response_from_wire: 宽松地解析服务端返回的 JSON，
  缺失的列表字段按空处理，无法识别的 part 保留为 UnknownPart。
"""

from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import (
    Blob,
    Candidate,
    CodeExecutionResult,
    CodeExecutionResultPart,
    Content,
    ContentResponse,
    ExecutableCode,
    ExecutableCodePart,
    FileData,
    FileDataPart,
    FunctionCall,
    FunctionCallPart,
    FunctionResponse,
    FunctionResponsePart,
    InlineDataPart,
    Part,
    PromptFeedback,
    TextPart,
    ThoughtPart,
    UnknownPart,
    UsageMetadata,
)


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(word.capitalize() for word in rest)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (list, tuple, dict)) and not value)


def part_to_wire(part: Part) -> Dict[str, Any]:
    if isinstance(part, TextPart):
        return {"text": part.text}
    if isinstance(part, ThoughtPart):
        payload: Dict[str, Any] = {"thought": part.thought}
        if part.text is not None:
            payload["text"] = part.text
        return payload
    if isinstance(part, InlineDataPart):
        return {"inlineData": to_wire(part.inline_data)}
    if isinstance(part, FileDataPart):
        return {"fileData": to_wire(part.file_data)}
    if isinstance(part, FunctionCallPart):
        return {"functionCall": to_wire(part.function_call)}
    if isinstance(part, FunctionResponsePart):
        # response 为必填字段，即使为空也要发送
        payload = to_wire(part.function_response)
        payload["response"] = dict(part.function_response.response)
        return {"functionResponse": payload}
    if isinstance(part, ExecutableCodePart):
        return {"executableCode": to_wire(part.executable_code)}
    if isinstance(part, CodeExecutionResultPart):
        return {"codeExecutionResult": to_wire(part.code_execution_result)}
    if isinstance(part, UnknownPart):
        return dict(part.raw)
    raise TypeError(f"Unsupported part type: {type(part).__name__}")


def to_wire(obj: Any) -> Any:
    """递归转换为接口 JSON 结构。"""

    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Content):
        return {"parts": [part_to_wire(p) for p in obj.parts], "role": obj.role}
    if isinstance(
        obj,
        (
            TextPart,
            ThoughtPart,
            InlineDataPart,
            FileDataPart,
            FunctionCallPart,
            FunctionResponsePart,
            ExecutableCodePart,
            CodeExecutionResultPart,
            UnknownPart,
        ),
    ):
        return part_to_wire(obj)
    if is_dataclass(obj) and not isinstance(obj, type):
        payload: Dict[str, Any] = {}
        for f in fields(obj):
            value = getattr(obj, f.name)
            if _is_empty(value):
                continue
            payload[camel_case(f.name)] = to_wire(value)
        return payload
    if isinstance(obj, dict):
        # dict 的 key 是用户数据（参数名、属性名），保持原样
        return {k: to_wire(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_wire(v) for v in obj]
    return obj


def part_from_wire(data: Dict[str, Any]) -> Part:
    if not isinstance(data, dict):
        return UnknownPart(raw={"value": data})
    if "functionCall" in data:
        fc = data["functionCall"] or {}
        return FunctionCallPart(
            FunctionCall(name=fc.get("name", ""), id=fc.get("id"), args=fc.get("args"))
        )
    if "functionResponse" in data:
        fr = data["functionResponse"] or {}
        return FunctionResponsePart(
            FunctionResponse(name=fr.get("name", ""), response=fr.get("response") or {}, id=fr.get("id"))
        )
    if "inlineData" in data:
        blob = data["inlineData"] or {}
        return InlineDataPart(Blob(mime_type=blob.get("mimeType", ""), data=blob.get("data", "")))
    if "fileData" in data:
        fd = data["fileData"] or {}
        return FileDataPart(FileData(mime_type=fd.get("mimeType", ""), file_uri=fd.get("fileUri", "")))
    if "executableCode" in data:
        ec = data["executableCode"] or {}
        return ExecutableCodePart(
            ExecutableCode(language=ec.get("language", "LANGUAGE_UNSPECIFIED"), code=ec.get("code", ""))
        )
    if "codeExecutionResult" in data:
        cr = data["codeExecutionResult"] or {}
        return CodeExecutionResultPart(
            CodeExecutionResult(outcome=cr.get("outcome", "OUTCOME_UNSPECIFIED"), output=cr.get("output", ""))
        )
    if data.get("thought"):
        return ThoughtPart(thought=True, text=data.get("text"))
    if "text" in data:
        return TextPart(text=data["text"] or "")
    if "thought" in data:
        return ThoughtPart(thought=bool(data["thought"]))
    return UnknownPart(raw=dict(data))


def content_from_wire(data: Optional[Dict[str, Any]], default_role: str = "model") -> Content:
    data = data or {}
    role = data.get("role") or default_role
    if role not in ("user", "model"):
        role = default_role
    parts = [part_from_wire(p) for p in data.get("parts") or []]
    return Content(parts=tuple(parts), role=role)


def _usage_from_wire(data: Optional[Dict[str, Any]]) -> Optional[UsageMetadata]:
    if not data:
        return None
    return UsageMetadata(
        prompt_token_count=data.get("promptTokenCount"),
        cached_content_token_count=data.get("cachedContentTokenCount"),
        candidates_token_count=data.get("candidatesTokenCount"),
        tool_use_prompt_token_count=data.get("toolUsePromptTokenCount"),
        thoughts_token_count=data.get("thoughtsTokenCount"),
        total_token_count=data.get("totalTokenCount"),
    )


def candidate_from_wire(data: Dict[str, Any]) -> Candidate:
    return Candidate(
        content=content_from_wire(data.get("content")),
        finish_reason=data.get("finishReason"),
        safety_ratings=list(data.get("safetyRatings") or []),
        citation_metadata=data.get("citationMetadata"),
        grounding_metadata=data.get("groundingMetadata"),
        avg_logprobs=data.get("avgLogprobs"),
        index=data.get("index"),
        token_count=data.get("tokenCount"),
    )


def response_from_wire(data: Dict[str, Any]) -> ContentResponse:
    feedback = data.get("promptFeedback")
    return ContentResponse(
        candidates=[candidate_from_wire(c) for c in data.get("candidates") or []],
        prompt_feedback=(
            PromptFeedback(
                block_reason=feedback.get("blockReason"),
                safety_ratings=list(feedback.get("safetyRatings") or []),
            )
            if feedback
            else None
        ),
        usage_metadata=_usage_from_wire(data.get("usageMetadata")),
        model_version=data.get("modelVersion"),
        error=data.get("error"),
    )


def contents_to_wire(contents: List[Content]) -> List[Dict[str, Any]]:
    return [to_wire(c) for c in contents]


def contents_from_wire(items: List[Dict[str, Any]]) -> List[Content]:
    return [content_from_wire(item, default_role="user") for item in items]

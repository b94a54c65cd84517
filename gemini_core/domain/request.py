"""请求侧数据模型。

GenerateContentRequest 是每次发往 streamGenerateContent 的完整请求体：
系统指令、全部历史、声明的工具、安全阈值与生成参数。
服务端在两次调用之间不保存状态，历史完全由客户端维护。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import Content


class HarmCategory(str, Enum):
    HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"
    CIVIC_INTEGRITY = "HARM_CATEGORY_CIVIC_INTEGRITY"


class HarmBlockThreshold(str, Enum):
    BLOCK_NONE = "BLOCK_NONE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    UNSPECIFIED = "HARM_BLOCK_THRESHOLD_UNSPECIFIED"
    OFF = "OFF"


DEFAULT_THRESHOLD = HarmBlockThreshold.BLOCK_LOW_AND_ABOVE


class Modality(str, Enum):
    UNSPECIFIED = "MODALITY_UNSPECIFIED"
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"


@dataclass
class SafetySetting:
    category: HarmCategory
    threshold: HarmBlockThreshold = DEFAULT_THRESHOLD


@dataclass
class Schema:
    """工具参数 schema（OpenAPI 子集）。

    min/max 类计数字段按接口要求以字符串（int64）形式发送。
    """

    type: str = "TYPE_UNSPECIFIED"
    format: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    nullable: Optional[bool] = None
    enum: List[str] = field(default_factory=list)
    max_items: Optional[str] = None
    min_items: Optional[str] = None
    properties: Dict[str, "Schema"] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)
    min_properties: Optional[str] = None
    max_properties: Optional[str] = None
    min_length: Optional[str] = None
    max_length: Optional[str] = None
    pattern: Optional[str] = None
    example: Optional[Any] = None
    any_of: List["Schema"] = field(default_factory=list)
    property_ordering: List[str] = field(default_factory=list)
    default: Optional[Any] = None
    items: Optional["Schema"] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None


@dataclass
class FunctionDeclaration:
    name: str
    description: str
    parameters: Optional[Schema] = None


@dataclass
class Tool:
    function_declarations: List[FunctionDeclaration] = field(default_factory=list)
    code_execution: Optional[Dict[str, Any]] = None
    google_search: Optional[Dict[str, Any]] = None
    url_context: Optional[Dict[str, Any]] = None


@dataclass
class FunctionCallingConfig:
    # AUTO / ANY / NONE / VALIDATED
    mode: Optional[str] = None
    allowed_function_names: List[str] = field(default_factory=list)


@dataclass
class ToolConfig:
    function_calling_config: Optional[FunctionCallingConfig] = None


@dataclass
class PrebuiltVoiceConfig:
    voice_name: str


@dataclass
class VoiceConfig:
    prebuilt_voice_config: PrebuiltVoiceConfig


@dataclass
class SpeechConfig:
    voice_config: VoiceConfig
    language_code: Optional[str] = None


@dataclass
class ThinkingConfig:
    include_thoughts: bool = False
    thinking_budget: Optional[int] = None


@dataclass
class GenerationConfig:
    stop_sequences: List[str] = field(default_factory=list)
    response_mime_type: Optional[str] = None
    response_schema: Optional[Schema] = None
    response_modalities: List[Modality] = field(default_factory=list)
    candidate_count: Optional[int] = None
    max_output_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    seed: Optional[int] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    response_logprobs: Optional[bool] = None
    logprobs: Optional[int] = None
    enable_enhanced_civic_answers: Optional[bool] = None
    speech_config: Optional[SpeechConfig] = None
    thinking_config: Optional[ThinkingConfig] = None
    # MEDIA_RESOLUTION_LOW / MEDIUM / HIGH
    media_resolution: Optional[str] = None


@dataclass
class GenerateContentRequest:
    """一次完整的生成请求。"""

    contents: List[Content] = field(default_factory=list)
    system_instruction: Optional[Content] = None
    tools: List[Tool] = field(default_factory=list)
    tool_config: Optional[ToolConfig] = None
    safety_settings: List[SafetySetting] = field(default_factory=list)
    generation_config: Optional[GenerationConfig] = None
    cached_content: Optional[str] = None


def default_safety_settings() -> List[SafetySetting]:
    """所有危害类别都使用默认阈值。"""

    return [SafetySetting(category=cat) for cat in HarmCategory]

"""工具数据结构定义。

这些 dataclass 描述工具协作方（collaborator）与 driver 之间的约定：
- ToolSpec: 协作方声明的一个工具（名称、描述、JSON schema 形式的参数）。
- ContentItem: 工具执行结果中的一项，每项对应一个 FunctionResponsePart。
- ToolCollaborator: 能列出并执行工具的外部组件（本地函数、MCP server 等）。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Union


@dataclass
class ToolSpec:
    """一个可供模型调用的工具声明。"""

    name: str
    description: Optional[str] = None
    input_schema: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})


@dataclass
class TextItem:
    text: str

    def to_response(self) -> Dict[str, Any]:
        return {"text": self.text}


@dataclass
class ImageItem:
    data: str
    mime_type: str

    def to_response(self) -> Dict[str, Any]:
        return {"image": {"mimeType": self.mime_type, "data": self.data}}


@dataclass
class AudioItem:
    data: str
    mime_type: str

    def to_response(self) -> Dict[str, Any]:
        return {"audio": {"mimeType": self.mime_type, "data": self.data}}


@dataclass
class ResourceItem:
    """内嵌资源，text 与 blob 二选一。"""

    uri: str
    mime_type: Optional[str] = None
    text: Optional[str] = None
    blob: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        resource: Dict[str, Any] = {"uri": self.uri}
        if self.mime_type:
            resource["mimeType"] = self.mime_type
        if self.text is not None:
            resource["text"] = self.text
        if self.blob is not None:
            resource["blob"] = self.blob
        return {"resource": resource}


ContentItem = Union[TextItem, ImageItem, AudioItem, ResourceItem]


class ToolCollaborator(Protocol):
    """工具协作方协议。

    invoke 失败时直接抛出异常（网络、超时、协议错误等），
    由 dispatcher 统一包装为 ToolExecutionError。
    """

    async def list_tools(self) -> List[ToolSpec]:
        ...

    async def invoke(self, name: str, args: Dict[str, Any]) -> List[ContentItem]:
        ...

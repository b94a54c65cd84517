"""MCP 工具协作方。

把一个已初始化的 mcp.ClientSession 适配为 ToolCollaborator：
list_tools 映射 mcp.types.Tool，invoke 把 CallToolResult 的每个 content
转换为一个 ContentItem。连接的建立与关闭由调用方负责。
"""

from typing import Any, Dict, List

from mcp import ClientSession
from mcp import types

from gemini_core.domain.exceptions import CollaboratorError
from .definitions import AudioItem, ContentItem, ImageItem, ResourceItem, TextItem, ToolSpec


class McpToolCollaborator:
    def __init__(self, session: ClientSession, name: str = "mcp"):
        self._session = session
        self.name = name

    async def list_tools(self) -> List[ToolSpec]:
        result = await self._session.list_tools()
        return [
            ToolSpec(
                name=tool.name,
                description=tool.description,
                input_schema=dict(tool.inputSchema or {}),
            )
            for tool in result.tools
        ]

    async def invoke(self, name: str, args: Dict[str, Any]) -> List[ContentItem]:
        result = await self._session.call_tool(name, args or {})
        items = [content_item_from_mcp(block) for block in result.content or []]
        if result.isError:
            detail = "\n".join(i.text for i in items if isinstance(i, TextItem)) or "tool reported an error"
            raise CollaboratorError(
                code="MCP_TOOL_ERROR",
                message=detail,
                tool_name=name,
                server=self.name,
            )
        return items


def content_item_from_mcp(block: Any) -> ContentItem:
    if isinstance(block, types.TextContent):
        return TextItem(block.text)
    if isinstance(block, types.ImageContent):
        return ImageItem(data=block.data, mime_type=block.mimeType)
    if isinstance(block, types.AudioContent):
        return AudioItem(data=block.data, mime_type=block.mimeType)
    if isinstance(block, types.EmbeddedResource):
        resource = block.resource
        if isinstance(resource, types.TextResourceContents):
            return ResourceItem(uri=str(resource.uri), mime_type=resource.mimeType, text=resource.text)
        return ResourceItem(uri=str(resource.uri), mime_type=resource.mimeType, blob=resource.blob)
    uri = getattr(block, "uri", None)
    if uri is not None:
        # resource_link 之类只带引用的内容
        return ResourceItem(uri=str(uri), mime_type=getattr(block, "mimeType", None))
    return TextItem(str(block))

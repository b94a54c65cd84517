import pytest
from mcp import types

from gemini_core.domain.exceptions import CollaboratorError
from gemini_core.tools.definitions import AudioItem, ImageItem, ResourceItem, TextItem
from gemini_core.tools.mcp_adapter import McpToolCollaborator, content_item_from_mcp


class FakeSession:
    def __init__(self, result):
        self._result = result
        self.calls = []

    async def list_tools(self):
        return types.ListToolsResult(
            tools=[
                types.Tool(
                    name="weather",
                    description="current weather",
                    inputSchema={"type": "object", "properties": {"city": {"type": "string"}}},
                )
            ]
        )

    async def call_tool(self, name, arguments):
        self.calls.append((name, arguments))
        return self._result


@pytest.mark.asyncio
async def test_list_tools_maps_specs():
    collaborator = McpToolCollaborator(FakeSession(None))
    specs = await collaborator.list_tools()
    assert [s.name for s in specs] == ["weather"]
    assert specs[0].input_schema["properties"]["city"] == {"type": "string"}


@pytest.mark.asyncio
async def test_invoke_maps_each_content_block():
    result = types.CallToolResult(
        content=[
            types.TextContent(type="text", text="sunny"),
            types.ImageContent(type="image", data="AAAA", mimeType="image/png"),
        ],
        isError=False,
    )
    session = FakeSession(result)
    items = await McpToolCollaborator(session).invoke("weather", {"city": "Oslo"})

    assert session.calls == [("weather", {"city": "Oslo"})]
    assert items == [TextItem("sunny"), ImageItem(data="AAAA", mime_type="image/png")]


@pytest.mark.asyncio
async def test_is_error_raises_collaborator_error():
    result = types.CallToolResult(content=[types.TextContent(type="text", text="city unknown")], isError=True)
    with pytest.raises(CollaboratorError) as exc_info:
        await McpToolCollaborator(FakeSession(result), name="weather-server").invoke("weather", {})
    assert exc_info.value.message == "city unknown"
    assert exc_info.value.extra["server"] == "weather-server"


def test_resource_and_audio_blocks():
    text_res = types.EmbeddedResource(
        type="resource",
        resource=types.TextResourceContents(uri="file:///notes.txt", mimeType="text/plain", text="hello"),
    )
    blob_res = types.EmbeddedResource(
        type="resource",
        resource=types.BlobResourceContents(uri="file:///a.bin", mimeType="application/octet-stream", blob="AAAA"),
    )
    audio = types.AudioContent(type="audio", data="UklG", mimeType="audio/wav")

    assert content_item_from_mcp(text_res) == ResourceItem(uri="file:///notes.txt", mime_type="text/plain", text="hello")
    assert content_item_from_mcp(blob_res).to_response() == {
        "resource": {"uri": "file:///a.bin", "mimeType": "application/octet-stream", "blob": "AAAA"}
    }
    assert content_item_from_mcp(audio) == AudioItem(data="UklG", mime_type="audio/wav")

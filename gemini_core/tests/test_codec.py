from gemini_core.domain.codec import (
    content_from_wire,
    contents_from_wire,
    part_from_wire,
    response_from_wire,
    to_wire,
)
from gemini_core.domain.models import (
    Blob,
    Content,
    FunctionCall,
    FunctionCallPart,
    FunctionResponse,
    FunctionResponsePart,
    InlineDataPart,
    TextPart,
    ThoughtPart,
    UnknownPart,
)
from gemini_core.domain.request import (
    FunctionDeclaration,
    GenerateContentRequest,
    GenerationConfig,
    Modality,
    Schema,
    Tool,
    default_safety_settings,
)


def test_request_to_wire_uses_camel_case_and_skips_empty():
    req = GenerateContentRequest(
        contents=[Content.from_text("hi")],
        system_instruction=Content.from_text("be brief"),
        tools=[
            Tool(
                function_declarations=[
                    FunctionDeclaration(
                        name="lookup",
                        description="find things",
                        parameters=Schema(
                            type="OBJECT",
                            properties={"user_id": Schema(type="STRING")},
                            required=["user_id"],
                        ),
                    )
                ]
            )
        ],
        safety_settings=default_safety_settings()[:1],
        generation_config=GenerationConfig(response_modalities=[Modality.TEXT], max_output_tokens=64),
    )
    wire = to_wire(req)

    assert wire["contents"] == [{"parts": [{"text": "hi"}], "role": "user"}]
    assert wire["systemInstruction"]["parts"] == [{"text": "be brief"}]
    decl = wire["tools"][0]["functionDeclarations"][0]
    # 属性名是用户数据，不做 camelCase 转换
    assert decl["parameters"]["properties"] == {"user_id": {"type": "STRING"}}
    assert decl["parameters"]["required"] == ["user_id"]
    assert wire["safetySettings"] == [
        {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_LOW_AND_ABOVE"}
    ]
    assert wire["generationConfig"] == {"responseModalities": ["TEXT"], "maxOutputTokens": 64}
    assert "toolConfig" not in wire
    assert "cachedContent" not in wire


def test_function_parts_to_wire():
    call = FunctionCallPart(FunctionCall(name="X", args={"a": 1}))
    result = FunctionResponsePart(FunctionResponse(name="X", response={}))
    wire = to_wire(Content(parts=(call, result), role="model"))
    assert wire["parts"][0] == {"functionCall": {"name": "X", "args": {"a": 1}}}
    assert wire["parts"][1] == {"functionResponse": {"name": "X", "response": {}}}


def test_part_from_wire_variants():
    assert part_from_wire({"text": "hello"}) == TextPart("hello")
    assert part_from_wire({"thought": True, "text": "hmm"}) == ThoughtPart(thought=True, text="hmm")
    assert part_from_wire({"inlineData": {"mimeType": "image/png", "data": "AAAA"}}) == InlineDataPart(
        Blob("image/png", "AAAA")
    )
    call = part_from_wire({"functionCall": {"name": "X", "id": "c1", "args": {"a": 1}}})
    assert call == FunctionCallPart(FunctionCall(name="X", id="c1", args={"a": 1}))
    unknown = part_from_wire({"videoMetadata": {"startOffset": "1s"}})
    assert isinstance(unknown, UnknownPart)
    # 未识别的 part 原样回传
    assert to_wire(unknown) == {"videoMetadata": {"startOffset": "1s"}}


def test_response_from_wire():
    fragment = response_from_wire(
        {
            "candidates": [
                {
                    "content": {"parts": [{"text": "Hi"}], "role": "model"},
                    "finishReason": "STOP",
                    "index": 0,
                }
            ],
            "usageMetadata": {"promptTokenCount": 3, "candidatesTokenCount": 1, "totalTokenCount": 4},
            "modelVersion": "gemini-2.0-flash",
        }
    )
    assert fragment.error is None
    assert fragment.candidates[0].content == Content.from_text("Hi", role="model")
    assert fragment.candidates[0].finish_reason == "STOP"
    assert fragment.usage_metadata.total_token_count == 4

    error = response_from_wire({"error": {"code": 7, "message": "quota"}})
    assert error.error == {"code": 7, "message": "quota"}
    assert error.candidates == []


def test_content_defaults():
    assert content_from_wire({"parts": [{"text": "x"}]}).role == "model"
    assert content_from_wire({"parts": [], "role": "system"}).role == "model"
    assert contents_from_wire([{"parts": [{"text": "x"}]}])[0].role == "user"

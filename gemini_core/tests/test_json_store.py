import json
import tempfile
from pathlib import Path

import pytest

from gemini_core.domain.exceptions import GeminiError
from gemini_core.domain.models import (
    Content,
    FunctionCall,
    FunctionCallPart,
    FunctionResponse,
    FunctionResponsePart,
    TextPart,
)
from gemini_core.infrastructure.storage.json_store import JsonHistoryStore


def sample_turns():
    return [
        Content.from_text("weather in Oslo?"),
        Content.model(FunctionCallPart(FunctionCall(name="weather", args={"city": "Oslo"}))),
        Content.user(FunctionResponsePart(FunctionResponse(name="weather", response={"text": "sunny"}))),
        Content.model(TextPart("It is sunny.")),
    ]


def test_json_store_save_and_load():
    with tempfile.TemporaryDirectory() as d:
        root = Path(d) / ".storage"
        store = JsonHistoryStore(root=root)
        sid = store.new_session_id()
        store.save(sid, sample_turns(), meta={"model": "gemini-2.0-flash"})

        assert store.load(sid) == sample_turns()
        assert store.list_sessions() == [sid]
        raw = json.loads((root / "sessions" / f"{sid}.json").read_text(encoding="utf-8"))
        assert raw["meta"] == {"model": "gemini-2.0-flash"}
        assert raw["contents"][1]["parts"][0]["functionCall"]["name"] == "weather"


def test_json_store_delete_session():
    with tempfile.TemporaryDirectory() as d:
        store = JsonHistoryStore(root=Path(d))
        store.save("s-1", sample_turns())
        store.delete("s-1")
        assert store.list_sessions() == []
        with pytest.raises(GeminiError) as exc_info:
            store.load("s-1")
        assert exc_info.value.code == "SESSION_NOT_FOUND"


def test_json_store_rejects_path_like_ids():
    with tempfile.TemporaryDirectory() as d:
        store = JsonHistoryStore(root=Path(d))
        with pytest.raises(GeminiError) as exc_info:
            store.save("../escape", [])
        assert exc_info.value.code == "INVALID_SESSION_ID"

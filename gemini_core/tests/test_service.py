import pytest

from gemini_core.agents.client import ClientConfig, GeminiClient
from gemini_core.api import service
from gemini_core.domain.exceptions import ModelNotFoundError, ServiceError
from gemini_core.domain.models import Candidate, Content, ContentResponse, TextPart, UsageMetadata
from gemini_core.infrastructure.storage.json_store import JsonHistoryStore
from gemini_core.providers.registry import MODEL_REGISTRY, get_model


class ScriptedTransport:
    def __init__(self, *batches):
        self._batches = list(batches)

    async def post(self, model, request):
        return self._batches.pop(0)


def reply(text):
    return [
        ContentResponse(
            candidates=[Candidate(content=Content.model(TextPart(text)))],
            usage_metadata=UsageMetadata(prompt_token_count=2, candidates_token_count=1, total_token_count=3),
        )
    ]


@pytest.fixture
def store(tmp_path, monkeypatch):
    store = JsonHistoryStore(root=tmp_path)
    monkeypatch.setattr(service, "_store", store)
    return store


def make_client(*batches):
    return GeminiClient("gemini-2.0-flash", transport=ScriptedTransport(*batches), config=ClientConfig())


def test_run_chat_new_and_resumed_session(store):
    first = service.run_chat("Hello", instructions="be brief", client=make_client(reply("Hi")))
    assert first["text"] == "Hi"
    assert first["turns"] == 2
    assert first["usage"]["total_tokens"] == 3
    assert service.list_sessions() == [first["session_id"]]

    second = service.run_chat("And?", session_id=first["session_id"], client=make_client(reply("More")))
    assert second["session_id"] == first["session_id"]
    assert second["turns"] == 4

    history = service.get_session_history(first["session_id"])
    assert [h["role"] for h in history] == ["user", "model", "user", "model"]
    assert history[3]["text"] == "More"


def test_run_chat_failure_keeps_saved_history(store):
    ok = service.run_chat("Hello", client=make_client(reply("Hi")))
    failing = make_client([ContentResponse(error={"code": 7, "message": "quota"})])

    with pytest.raises(ServiceError):
        service.run_chat("again", session_id=ok["session_id"], client=failing)

    assert len(store.load(ok["session_id"])) == 2


def test_model_registry():
    assert set(MODEL_REGISTRY) == {
        "gemini-2.0-flash-exp-image-generation",
        "gemini-2.0-flash",
        "gemini-2.5-flash",
        "gemini-2.5-pro",
    }
    image_model = get_model("gemini-2.0-flash-exp-image-generation")
    assert not image_model.supports_system_instruction
    with pytest.raises(ModelNotFoundError):
        get_model("gemini-1.0-ultra")

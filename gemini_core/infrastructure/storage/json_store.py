import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from gemini_core.config.settings import settings
from gemini_core.domain.codec import contents_from_wire, contents_to_wire
from gemini_core.domain.exceptions import GeminiError
from gemini_core.domain.models import Content


class JsonHistoryStore:
    """把会话历史保存为 JSON 文件：{root}/sessions/{session_id}.json。"""

    def __init__(self, root: str | Path | None = None):
        self._root = Path(root or settings.storage_root).resolve()
        self._sessions = self._root / "sessions"
        self._sessions.mkdir(parents=True, exist_ok=True)

    def new_session_id(self) -> str:
        return f"s-{uuid4().hex}"

    def save(self, session_id: str, turns: Sequence[Content], meta: Optional[Dict[str, Any]] = None) -> None:
        path = self._path(session_id)
        tmp_path = path.with_name(f"{path.stem}.{uuid4().hex}.json.tmp")
        obj = {
            "id": session_id,
            "updated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "meta": meta or {},
            "contents": contents_to_wire(list(turns)),
        }
        try:
            tmp_path.write_text(json.dumps(obj, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise GeminiError(code="STORE_WRITE_ERROR", message=str(e)) from e

    def load(self, session_id: str) -> List[Content]:
        path = self._path(session_id)
        if not path.exists():
            raise GeminiError(code="SESSION_NOT_FOUND", message=session_id, http_status=404)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise GeminiError(code="STORE_READ_ERROR", message=str(e)) from e
        return contents_from_wire(data.get("contents") or [])

    def list_sessions(self) -> List[str]:
        return sorted(p.stem for p in self._sessions.glob("*.json"))

    def delete(self, session_id: str) -> None:
        path = self._path(session_id)
        if not path.exists():
            raise GeminiError(code="SESSION_NOT_FOUND", message=session_id, http_status=404)
        path.unlink()

    def _path(self, session_id: str) -> Path:
        if not session_id or "/" in session_id or "\\" in session_id or session_id.startswith("."):
            raise GeminiError(code="INVALID_SESSION_ID", message=repr(session_id))
        return self._sessions / f"{session_id}.json"

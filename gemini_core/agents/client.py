"""会话 driver。

GeminiClient 持有一个会话的全部状态（历史、工具注册表、请求配置），
每个 send_* 调用先暂存一个 user Turn，然后运行完整的状态机：

    IDLE -> SENDING -> CONSOLIDATING -> (CHECKING_TOOLS -> SENDING)* -> IDLE

传输失败、服务端错误、工具调度失败都会进入 FAILED 并把带类型的异常抛给调用方，
不做任何重试。
user Turn 随第一批成功合并的响应一起写入历史，因此第一次请求就失败时历史不变；
之后每个阶段成功提交的 Turn 不会回滚。
同一个 client 同一时刻只允许一个 send 在进行。
"""

import asyncio
import base64
import logging
import mimetypes
import time
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from uuid import uuid4

from gemini_core.config.settings import settings
from gemini_core.domain.conversation import ConversationState
from gemini_core.domain.exceptions import (
    ConcurrentSendError,
    GeminiError,
    ToolLoopLimitError,
    ValidationError,
    error_fields,
)
from gemini_core.domain.models import (
    Blob,
    Content,
    FileData,
    FileDataPart,
    InlineDataPart,
    Part,
    TextPart,
)
from gemini_core.domain.request import (
    GenerateContentRequest,
    GenerationConfig,
    SafetySetting,
    ToolConfig,
    default_safety_settings,
)
from gemini_core.infrastructure.logging.logger import logger
from gemini_core.infrastructure.storage.json_store import JsonHistoryStore
from gemini_core.providers.base import Transport
from gemini_core.providers.gemini_client import GeminiTransport
from gemini_core.providers.registry import GoogleModel, get_model
from gemini_core.tools.definitions import ToolCollaborator
from gemini_core.tools.dispatcher import dispatch_all, has_pending_calls
from gemini_core.tools.registry import ToolRegistration
from .consolidator import Responses, consolidate


class DriverState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    CONSOLIDATING = "consolidating"
    CHECKING_TOOLS = "checking_tools"
    FAILED = "failed"


@dataclass
class ClientConfig:
    # None 或 0 表示不限制工具轮数
    max_tool_rounds: Optional[int] = None
    parallel_tool_calls: bool = False

    @classmethod
    def from_settings(cls, cfg=settings) -> "ClientConfig":
        return cls(
            max_tool_rounds=getattr(cfg, "max_tool_rounds", None),
            parallel_tool_calls=bool(getattr(cfg, "parallel_tool_calls", False)),
        )


def load_blob(path: Union[str, Path]) -> Blob:
    """读取文件并编码为 Blob（URL-safe Base64）。"""

    p = Path(path)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise ValidationError(code="FILE_READ_ERROR", message=str(e), path=str(p)) from e
    mime_type = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
    return Blob(mime_type=mime_type, data=base64.urlsafe_b64encode(raw).decode("ascii"))


class GeminiClient:
    def __init__(
        self,
        model: Union[str, GoogleModel, None] = None,
        key: Optional[str] = None,
        transport: Optional[Transport] = None,
        config: Optional[ClientConfig] = None,
    ):
        if model is None:
            model = settings.gemini_model
        self._model = get_model(model) if isinstance(model, str) else model
        self._transport = transport or GeminiTransport(key or settings.gemini_api_key or "", settings)
        self._config = config or ClientConfig.from_settings()
        self._request = GenerateContentRequest()
        self._conversation = ConversationState()
        self._registration = ToolRegistration()
        self._lock = asyncio.Lock()
        self.state = DriverState.IDLE

    # ---- 配置 ----

    @property
    def model(self) -> GoogleModel:
        return self._model

    @property
    def registration(self) -> ToolRegistration:
        return self._registration

    def with_defaults(self) -> "GeminiClient":
        """按模型能力设置默认安全阈值与输出模态。"""

        self._request.safety_settings = default_safety_settings()
        self._request.generation_config = GenerationConfig(
            response_modalities=self._model.default_modalities()
        )
        return self

    def with_safety(self, safety_settings: Sequence[SafetySetting]) -> "GeminiClient":
        self._request.safety_settings = list(safety_settings)
        return self

    def with_instructions(self, system_instruction: str) -> "GeminiClient":
        """设置系统指令。

        不支持 system instruction 的模型会把指令作为第一条 user Turn 放在历史最前面。
        """

        instruction = Content.from_text(system_instruction, role="user")
        if self._model.supports_system_instruction:
            self._request.system_instruction = instruction
        else:
            self._conversation.prepend(instruction)
        return self

    def with_options(self, options: GenerationConfig) -> "GeminiClient":
        if self._model.image_generation:
            self._request.generation_config = replace(options)
        else:
            self._request.generation_config = replace(
                options, response_modalities=self._model.default_modalities()
            )
        return self

    def with_tool_config(self, tool_config: ToolConfig) -> "GeminiClient":
        self._request.tool_config = tool_config
        return self

    def with_cached_content(self, name: Optional[str]) -> "GeminiClient":
        self._request.cached_content = name
        return self

    def with_max_tool_rounds(self, rounds: Optional[int]) -> "GeminiClient":
        self._config = replace(self._config, max_tool_rounds=rounds)
        return self

    async def with_tools(self, collaborators: Sequence[ToolCollaborator]) -> "GeminiClient":
        """向协作方查询工具并建立注册表，之后的请求都会声明这些工具。"""

        self._registration = await ToolRegistration.build(collaborators)
        self._log(
            logging.INFO,
            "Registered tools",
            {"model": self._model.name},
            tools=self._registration.names,
            skipped=sorted(self._registration.skipped),
        )
        return self

    # ---- 发送 ----

    async def send_text(self, text: str) -> Responses:
        return await self.send_content(Content.from_text(text))

    async def send_image(self, path: Union[str, Path], message: Optional[str] = None) -> Responses:
        blob = await asyncio.to_thread(load_blob, path)
        return await self.send_image_bytes(blob.mime_type, blob.data, message)

    async def send_image_bytes(self, mime_type: str, data: str, message: Optional[str] = None) -> Responses:
        """发送 Base64 编码的图像，可选附带一段文本组成同一个 Turn。"""

        parts: List[Part] = []
        if message:
            parts.append(TextPart(message))
        parts.append(InlineDataPart(Blob(mime_type=mime_type, data=data)))
        return await self.send_content(Content(parts=tuple(parts), role="user"))

    async def send_file(self, file_data: FileData, message: Optional[str] = None) -> Responses:
        parts: List[Part] = []
        if message:
            parts.append(TextPart(message))
        parts.append(FileDataPart(file_data))
        return await self.send_content(Content(parts=tuple(parts), role="user"))

    async def send_content(self, content: Content) -> Responses:
        if not content.parts:
            raise ValidationError(code="EMPTY_CONTENT", message="Content must have at least one part")
        if self._lock.locked():
            raise ConcurrentSendError(code="CONCURRENT_SEND", message="A send is already in progress")
        async with self._lock:
            return await self._run(Content(parts=content.parts, role="user"))

    async def _run(self, content: Content) -> Responses:
        start_time = time.time()
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "model": self._model.name,
        }
        # user Turn 随第一批成功的响应一起写入历史
        self._conversation.stage(content)
        rounds = 0
        cap = self._config.max_tool_rounds or None
        try:
            while True:
                self._transition(DriverState.SENDING, log_ctx, turns=len(self._conversation))
                batch = await self._transport.post(self._model.name, self.request())

                self._transition(DriverState.CONSOLIDATING, log_ctx, fragments=len(batch))
                responses = consolidate(batch, self._conversation)
                usage = responses.usage()
                if usage and usage.total_token_count is not None:
                    self._log(
                        logging.INFO,
                        "Token usage",
                        log_ctx,
                        prompt_tokens=usage.prompt_token_count,
                        candidates_tokens=usage.candidates_token_count,
                        total_tokens=usage.total_token_count,
                    )

                self._transition(DriverState.CHECKING_TOOLS, log_ctx)
                if not has_pending_calls(responses.fragments):
                    self._transition(
                        DriverState.IDLE,
                        log_ctx,
                        tool_rounds=rounds,
                        elapsed_seconds=round(time.time() - start_time, 2),
                    )
                    return responses

                if cap is not None and rounds >= cap:
                    raise ToolLoopLimitError(
                        code="TOOL_LOOP_LIMIT",
                        message=f"Exceeded max tool rounds ({cap})",
                        max_rounds=cap,
                    )
                rounds += 1
                self._log(
                    logging.INFO,
                    "Executing tool calls",
                    log_ctx,
                    round=rounds,
                    calls=[c.name for c in responses.function_calls()],
                )
                await dispatch_all(
                    responses.fragments,
                    self._registration,
                    self._conversation,
                    parallel=self._config.parallel_tool_calls,
                )
        except GeminiError as exc:
            self._conversation.discard()
            self.state = DriverState.FAILED
            self._log(logging.ERROR, "Send failed", log_ctx, **error_fields(exc))
            raise
        except Exception:
            self._conversation.discard()
            self.state = DriverState.FAILED
            logger.exception("Send failed", extra={"extra": dict(log_ctx)})
            raise

    # ---- 状态访问 ----

    def request(self) -> GenerateContentRequest:
        """当前会被发送的完整请求快照。"""

        return replace(
            self._request,
            contents=self._conversation.snapshot(),
            tools=self._registration.tools(),
            safety_settings=list(self._request.safety_settings),
        )

    def history(self) -> Tuple[Content, ...]:
        """返回完整的会话历史。"""

        return self._conversation.turns

    def save_history(self, store: JsonHistoryStore, session_id: str) -> None:
        store.save(session_id, self._conversation.turns, meta={"model": self._model.name})

    def load_history(self, store: JsonHistoryStore, session_id: str) -> "GeminiClient":
        if self._lock.locked():
            raise ConcurrentSendError(code="CONCURRENT_SEND", message="A send is already in progress")
        self._conversation.replace(store.load(session_id))
        return self

    def _transition(self, new_state: DriverState, log_ctx: Dict[str, Any], **fields: Any) -> None:
        previous = self.state
        self.state = new_state
        self._log(logging.INFO, "State transition", log_ctx, previous=previous.value, state=new_state.value, **fields)

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})

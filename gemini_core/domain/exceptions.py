"""统一异常模型。

一次 send 调用失败时，调用方总能拿到一个带类型的异常，
据此判断是哪一个阶段出错：传输层、服务端、还是工具调度。
所有异常都继承自 GeminiError，便于上层统一捕获。
"""

from typing import Any, Dict, Optional


class GeminiError(Exception):
    """异常基类。

    Attributes:
        code: 机器可读错误码（如 "TRANSPORT_ERROR"）。
        message: 可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 trace_id、tool_name 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class TransportError(GeminiError):
    """网络或序列化错误（连接失败、超时、响应无法解析等），不重试。"""


class ServiceError(GeminiError):
    """服务端在某个响应片段中返回了 error 对象。"""

    @classmethod
    def from_payload(cls, payload: Any) -> "ServiceError":
        if not isinstance(payload, dict):
            return cls(code="SERVICE_ERROR", message=str(payload), payload=payload)
        status_code: Optional[int] = None
        raw_code = payload.get("code")
        if isinstance(raw_code, int):
            status_code = raw_code
        return cls(
            code="SERVICE_ERROR",
            message=str(payload.get("message") or payload),
            http_status=status_code if status_code and status_code >= 400 else 400,
            status_code=status_code,
            status=payload.get("status"),
            payload=payload,
        )

    @property
    def status_code(self) -> Optional[int]:
        return self.extra.get("status_code")


class SchemaError(GeminiError):
    """工具参数 schema 无法映射为请求所需的 Schema 结构。"""


class ToolNotFoundError(GeminiError):
    """模型请求调用的工具不在本次声明的工具列表中。"""


class ToolExecutionError(GeminiError):
    """工具协作方执行失败，原始异常通过 __cause__ 保留。"""


class CollaboratorError(GeminiError):
    """工具协作方主动报告的失败（例如 MCP 返回 isError）。"""


class ToolLoopLimitError(GeminiError):
    """工具调用轮数超过配置上限。"""


class ConcurrentSendError(GeminiError):
    """同一会话上已有一个 send 正在进行。"""


class ModelNotFoundError(GeminiError):
    """未知的模型名称。"""


class ValidationError(GeminiError):
    """参数或配置校验失败。"""


def error_fields(exc: GeminiError) -> Dict[str, Any]:
    """提取用于日志的结构化字段。"""

    fields: Dict[str, Any] = {"error_code": exc.code, "error": exc.message}
    for key in ("status_code", "tool_name"):
        if key in exc.extra:
            fields[key] = exc.extra[key]
    return fields

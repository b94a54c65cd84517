"""Gemini streamGenerateContent 传输层。

- URL: {base_url}/{model}:streamGenerateContent?key=<api_key>
- 请求体: GenerateContentRequest 的 camelCase JSON。
- 响应体: 不带 alt=sse 时服务端一次性返回 JSON 数组，每个元素是一个响应片段。

服务端的业务错误（配额、参数非法等）以 {"error": {...}} 的形式返回，
这里把它包装成一个带 error 的片段交给 consolidator，由其抛出 ServiceError；
真正的网络/解析失败才抛出 TransportError。本层不做重试。
"""

import json
from typing import Any, List

import httpx

from gemini_core.config.settings import settings
from gemini_core.domain.codec import response_from_wire, to_wire
from gemini_core.domain.exceptions import TransportError, ValidationError
from gemini_core.domain.models import ContentResponse
from gemini_core.domain.request import GenerateContentRequest

URL_EXTENSION = ":streamGenerateContent"


class GeminiTransport:
    """基于 httpx 的 Transport 实现。"""

    name = "gemini"

    def __init__(self, api_key: str, cfg=settings):
        if not api_key:
            raise ValidationError(code="MISSING_API_KEY", message="GEMINI_API_KEY not set")
        self._api_key = api_key
        self._settings = cfg

    def url(self, model: str) -> str:
        base = getattr(self._settings, "gemini_base_url", "").rstrip("/")
        return f"{base}/{model}{URL_EXTENSION}"

    async def post(self, model: str, request: GenerateContentRequest) -> List[ContentResponse]:
        payload = to_wire(request)
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.post(
                    self.url(model),
                    params={"key": self._api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.RequestError as e:
            raise TransportError(code="NETWORK_ERROR", message=str(e)) from e

        try:
            data = resp.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise TransportError(
                code="DECODE_ERROR",
                message=f"Invalid JSON response (HTTP {resp.status_code})",
                http_status=resp.status_code,
            ) from e
        return self._parse_batch(data, resp.status_code)

    @staticmethod
    def _parse_batch(data: Any, status_code: int) -> List[ContentResponse]:
        if isinstance(data, dict):
            if "error" in data:
                return [ContentResponse(error=data["error"])]
            items = [data]
        elif isinstance(data, list):
            items = data
        else:
            raise TransportError(
                code="DECODE_ERROR",
                message=f"Unexpected response payload: {type(data).__name__}",
                http_status=status_code,
            )
        fragments: List[ContentResponse] = []
        for item in items:
            if not isinstance(item, dict):
                raise TransportError(
                    code="DECODE_ERROR",
                    message="Response fragment is not an object",
                    http_status=status_code,
                )
            fragments.append(response_from_wire(item))
        # 流式接口的业务错误以 [{"error": {...}}] 返回，交给 consolidator 处理
        if status_code >= 400 and not any(f.error is not None for f in fragments):
            raise TransportError(
                code="API_ERROR",
                message=f"HTTP {status_code} without error body",
                http_status=status_code,
            )
        return fragments

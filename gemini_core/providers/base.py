"""Transport 抽象接口。

driver 不直接依赖 HTTP 客户端，而是依赖此协议：
给定完整请求，返回一批响应片段；失败时抛出 TransportError。
测试中可以注入假的实现。
"""

from typing import List, Protocol

from gemini_core.domain.models import ContentResponse
from gemini_core.domain.request import GenerateContentRequest


class Transport(Protocol):
    async def post(self, model: str, request: GenerateContentRequest) -> List[ContentResponse]:
        ...

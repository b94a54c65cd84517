"""LLM 传输层。

该包下的模块负责：
- 定义 Transport 抽象接口 (base)。
- 维护模型能力表 (registry)。
- 提供 Gemini HTTP 实现 (gemini_client)。
"""

from typing import Optional

from gemini_core.config.settings import settings
from gemini_core.providers.base import Transport
from gemini_core.providers.gemini_client import GeminiTransport


def create_transport(api_key: Optional[str] = None) -> Transport:
    """根据配置创建 Transport 实例，默认读取 settings 中的密钥。"""

    return GeminiTransport(api_key or getattr(settings, "gemini_api_key", None) or "", settings)

"""Gemini Core 顶层包。

该包提供一个有状态的多轮会话 driver，支持多模态输入与模型发起的工具调用：
配置加载、对话数据模型、HTTP 传输、响应合并、工具注册与调度，
以及会话历史的持久化。
"""

from gemini_core.agents.client import ClientConfig, DriverState, GeminiClient
from gemini_core.agents.consolidator import Responses

__all__ = ["ClientConfig", "DriverState", "GeminiClient", "Responses"]

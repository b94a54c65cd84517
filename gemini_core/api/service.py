"""对外 API 服务模块。

提供同步的简化函数接口，供脚本或非 async 的上层应用调用。
每个会话对应一个 GeminiClient，历史保存在 JsonHistoryStore 中。
"""

import asyncio
from typing import Any, Dict, List, Optional

from gemini_core.agents.client import GeminiClient
from gemini_core.config.settings import settings
from gemini_core.infrastructure.logging.logger import logger
from gemini_core.infrastructure.storage.json_store import JsonHistoryStore


_store: Optional[JsonHistoryStore] = None


def get_store() -> JsonHistoryStore:
    """获取默认的历史存储实例（单例）。"""
    global _store
    if _store is None:
        _store = JsonHistoryStore(root=settings.storage_root)
    return _store


def run_chat(
    user_input: str,
    session_id: Optional[str] = None,
    instructions: Optional[str] = None,
    client: Optional[GeminiClient] = None,
) -> Dict[str, Any]:
    """发送一条文本并返回结果。

    Args:
        user_input: 用户输入内容
        session_id: 会话ID（可选，不提供则创建新会话）
        instructions: 系统指令（仅在新会话时生效）
        client: 预先配置好的 client（可选，用于注入工具或测试用 transport）

    Returns:
        包含会话ID、回复文本、图像数量和 token 统计的字典

    Raises:
        各种 domain.exceptions 中定义的异常
    """
    store = get_store()
    client = client or GeminiClient().with_defaults()
    if session_id:
        client.load_history(store, session_id)
    else:
        session_id = store.new_session_id()
        if instructions:
            client.with_instructions(instructions)
    try:
        responses = asyncio.run(client.send_text(user_input))
    except Exception as e:
        logger.error(f"Chat failed: {e}", extra={"extra": {
            "session_id": session_id,
            "error": str(e),
        }})
        raise
    finally:
        client.save_history(store, session_id)

    usage = responses.usage()
    return {
        "session_id": session_id,
        "text": responses.text() or "",
        "images": len(responses.images()),
        "turns": len(client.history()),
        "usage": {
            "prompt_tokens": usage.prompt_token_count,
            "candidates_tokens": usage.candidates_token_count,
            "total_tokens": usage.total_token_count,
        } if usage else None,
    }


def list_sessions() -> List[str]:
    """列出所有已保存的会话ID。"""
    return get_store().list_sessions()


def get_session_history(session_id: str) -> List[Dict[str, Any]]:
    """获取会话的所有 Turn（角色 + 文本摘要）。

    Args:
        session_id: 会话ID

    Returns:
        Turn 列表
    """
    turns = get_store().load(session_id)
    return [
        {
            "role": t.role,
            "text": t.text,
            "part_count": len(t.parts),
            "tool_calls": [c.name for c in t.function_calls],
        }
        for t in turns
    ]

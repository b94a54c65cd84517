"""工具调度。

一轮调度的流程：
1. 按到达顺序扫描整批片段中所有候选的 part，收集 FunctionCallPart；
2. 逐个按名称精确匹配注册表中的协作方并执行；
3. 每个返回的 ContentItem 生成一个 FunctionResponsePart（同名，不带调用 id）；
4. 本轮全部结果合并为一个 user Turn，全部成功后才写入历史。

任意一个调用失败（未声明的工具或协作方报错）都会终止本轮，历史不变。
"""

import asyncio
from typing import Any, Dict, List, Sequence

from gemini_core.domain.conversation import ConversationState
from gemini_core.domain.exceptions import GeminiError, ToolExecutionError
from gemini_core.domain.models import (
    Content,
    ContentResponse,
    FunctionCall,
    FunctionCallPart,
    FunctionResponse,
    FunctionResponsePart,
    iter_parts,
)
from gemini_core.infrastructure.logging.logger import logger
from .definitions import ContentItem
from .registry import ToolRegistration


def pending_calls(batch: Sequence[ContentResponse]) -> List[FunctionCall]:
    return [p.function_call for p in iter_parts(batch) if isinstance(p, FunctionCallPart)]


def has_pending_calls(batch: Sequence[ContentResponse]) -> bool:
    return any(isinstance(p, FunctionCallPart) for p in iter_parts(batch))


async def _invoke(call: FunctionCall, registration: ToolRegistration) -> List[ContentItem]:
    collaborator = registration.resolve(call.name)
    args: Dict[str, Any] = dict(call.args or {})
    try:
        return list(await collaborator.invoke(call.name, args))
    except Exception as exc:
        message = exc.message if isinstance(exc, GeminiError) else str(exc)
        raise ToolExecutionError(
            code="TOOL_EXECUTION_ERROR",
            message=message or type(exc).__name__,
            tool_name=call.name,
            tool_call_id=call.id,
        ) from exc


async def dispatch_all(
    batch: Sequence[ContentResponse],
    registration: ToolRegistration,
    state: ConversationState,
    parallel: bool = False,
) -> bool:
    """执行整批片段中的全部工具调用，返回是否发生了调度。"""

    calls = pending_calls(batch)
    if not calls:
        return False

    # 先全部解析一遍，未声明的工具在执行任何调用之前就失败
    for call in calls:
        registration.resolve(call.name)

    if parallel:
        tasks = [asyncio.ensure_future(_invoke(call, registration)) for call in calls]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # 任一调用失败即终止本轮，取消其余仍在执行的调用
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
    else:
        results = []
        for call in calls:
            results.append(await _invoke(call, registration))

    parts: List[FunctionResponsePart] = []
    for call, items in zip(calls, results):
        logger.info(
            "Tool call finished",
            extra={"extra": {"tool_name": call.name, "tool_call_id": call.id, "item_count": len(items)}},
        )
        if not items:
            # 每个调用至少回传一个结果，避免模型收不到响应或产生空 Turn
            parts.append(FunctionResponsePart(FunctionResponse(name=call.name, response={})))
        for item in items:
            parts.append(
                FunctionResponsePart(FunctionResponse(name=call.name, response=item.to_response()))
            )

    state.stage(Content(parts=tuple(parts), role="user"))
    state.commit()
    return True

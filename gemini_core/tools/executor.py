"""进程内工具协作方。

把普通 Python 函数（同步或 async）注册为工具。
函数接收参数 dict，返回值按以下规则规范化为 ContentItem 列表：
str -> TextItem；ContentItem 原样；dict -> JSON 文本；list/tuple 逐项展开。
相同名称与参数的调用默认复用缓存结果，构造时传 cache=False 关闭。
"""

import inspect
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from gemini_core.domain.exceptions import ToolNotFoundError
from .definitions import AudioItem, ContentItem, ImageItem, ResourceItem, TextItem, ToolSpec

ToolFunc = Callable[[Dict[str, Any]], Union[Any, Awaitable[Any]]]
CONTENT_ITEM_TYPES = (TextItem, ImageItem, AudioItem, ResourceItem)


class LocalToolCollaborator:
    def __init__(self, cache: bool = True):
        self._tools: Dict[str, Tuple[ToolSpec, ToolFunc]] = {}
        self._cache_enabled = cache
        self._cache: Dict[tuple, List[ContentItem]] = {}

    def register(
        self,
        name: str,
        func: ToolFunc,
        description: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> "LocalToolCollaborator":
        spec = ToolSpec(
            name=name,
            description=description if description is not None else inspect.getdoc(func),
            input_schema=parameters or {"type": "object", "properties": {}},
        )
        self._tools[name] = (spec, func)
        return self

    def tool(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> Callable[[ToolFunc], ToolFunc]:
        """装饰器形式的 register。"""

        def _decorator(func: ToolFunc) -> ToolFunc:
            self.register(name or func.__name__, func, description, parameters)
            return func

        return _decorator

    async def list_tools(self) -> List[ToolSpec]:
        return [spec for spec, _ in self._tools.values()]

    async def invoke(self, name: str, args: Dict[str, Any]) -> List[ContentItem]:
        entry = self._tools.get(name)
        if entry is None:
            raise ToolNotFoundError(code="TOOL_NOT_FOUND", message=f"Tool '{name}' not registered", tool_name=name)
        key = (name, json.dumps(args, sort_keys=True, ensure_ascii=False, default=str))
        if self._cache_enabled and key in self._cache:
            return list(self._cache[key])
        _, func = entry
        result = func(args)
        if inspect.isawaitable(result):
            result = await result
        items = normalize_result(result)
        if self._cache_enabled:
            self._cache[key] = items
        return list(items)


def normalize_result(result: Any) -> List[ContentItem]:
    if result is None:
        return []
    if isinstance(result, CONTENT_ITEM_TYPES):
        return [result]
    if isinstance(result, str):
        return [TextItem(result)]
    if isinstance(result, (list, tuple)):
        items: List[ContentItem] = []
        for entry in result:
            items.extend(normalize_result(entry))
        return items
    if isinstance(result, dict):
        return [TextItem(json.dumps(result, ensure_ascii=False, default=str))]
    return [TextItem(str(result))]

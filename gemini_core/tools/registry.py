"""工具注册表。

ToolRegistration 在注册时一次性向每个协作方查询工具列表，
构建「工具名 -> 协作方」的显式映射以及随每次请求发送的声明列表。
之后的请求与调度都只使用这份快照，不再重新查询协作方。
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from gemini_core.domain.exceptions import SchemaError, ToolNotFoundError
from gemini_core.domain.request import FunctionDeclaration, Tool
from gemini_core.infrastructure.logging.logger import logger
from .definitions import ToolCollaborator, ToolSpec
from .schema import declaration_from_spec


@dataclass
class ToolRegistration:
    declarations: List[FunctionDeclaration] = field(default_factory=list)
    owners: Dict[str, ToolCollaborator] = field(default_factory=dict)
    skipped: Dict[str, str] = field(default_factory=dict)

    @classmethod
    async def build(cls, collaborators: Sequence[ToolCollaborator]) -> "ToolRegistration":
        registration = cls()
        for index, collaborator in enumerate(collaborators):
            specs = await collaborator.list_tools()
            for spec in specs:
                registration.add(spec, collaborator, source_index=index)
        return registration

    def add(self, spec: ToolSpec, collaborator: ToolCollaborator, source_index: int = 0) -> bool:
        """登记一个工具，返回是否成功加入声明列表。

        同名工具以先注册者为准；schema 无法转换的工具被跳过，不影响其他工具。
        """

        if spec.name in self.owners:
            logger.warning(
                "Duplicate tool name ignored",
                extra={"extra": {"tool_name": spec.name, "source_index": source_index}},
            )
            return False
        try:
            declaration = declaration_from_spec(spec)
        except SchemaError as exc:
            self.skipped[spec.name] = exc.message
            logger.warning(
                "Tool schema not convertible, tool omitted",
                extra={"extra": {"tool_name": spec.name, "error": exc.message}},
            )
            return False
        self.declarations.append(declaration)
        self.owners[spec.name] = collaborator
        return True

    @property
    def names(self) -> List[str]:
        return [d.name for d in self.declarations]

    def resolve(self, name: str) -> ToolCollaborator:
        owner: Optional[ToolCollaborator] = self.owners.get(name)
        if owner is None:
            raise ToolNotFoundError(
                code="TOOL_NOT_FOUND",
                message=f"Tool '{name}' is not declared",
                tool_name=name,
            )
        return owner

    def tools(self) -> List[Tool]:
        """请求中的 tools 字段；没有可用工具时为空列表（不发送该字段）。"""

        if not self.declarations:
            return []
        return [Tool(function_declarations=list(self.declarations))]

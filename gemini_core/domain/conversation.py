"""会话状态。

ConversationState 由 driver 独占：持久的历史（只追加、不回滚）
加上一个暂存区。新的 user 输入、一批响应或一次工具调度的结果先放入暂存区，
随请求一起发送；整批成功后 commit 合并进历史，失败时 discard，
历史保持上一次成功的状态。
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from .models import Content


@dataclass
class ConversationState:
    _turns: List[Content] = field(default_factory=list)
    _pending: List[Content] = field(default_factory=list)

    @property
    def turns(self) -> Tuple[Content, ...]:
        return tuple(self._turns)

    @property
    def pending(self) -> Tuple[Content, ...]:
        return tuple(self._pending)

    def __len__(self) -> int:
        return len(self._turns)

    def snapshot(self) -> List[Content]:
        """历史加暂存区，即下一次请求要发送的全部 Turn。"""

        return self._turns + self._pending

    def prepend(self, turn: Content) -> None:
        self._turns.insert(0, turn)

    def stage(self, turn: Content) -> None:
        self._pending.append(turn)

    def commit(self) -> int:
        count = len(self._pending)
        self._turns.extend(self._pending)
        self._pending.clear()
        return count

    def discard(self) -> int:
        count = len(self._pending)
        self._pending.clear()
        return count

    def replace(self, turns: Iterable[Content]) -> None:
        """整体替换历史（从存储恢复会话时使用）。"""

        self._pending.clear()
        self._turns = list(turns)

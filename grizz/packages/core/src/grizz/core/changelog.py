"""Changelog 缓存与去重合并

Changelog 是单个清单实例的进程内事件工作集，在下一次成功拉取前是唯一依据。
- known: 最近一次拉取到的远端集合（去重并按 ts 排序）
- confirmed: 此后本实例已确认写入、但尚未出现在拉取结果中的事件
- pending: 本地已写入但尚未被存储端确认的事件

存储端在持久化时才分配时间戳，本地临时时间戳与远端时间戳不可比较，
因此 confirmed 与 pending 不参与去重合并，也不改写时间戳，
只按写入顺序接在 known 之后。下一次拉取时由远端的权威副本取代 confirmed。
"""

from collections.abc import Iterable

from .models.event import Event
from .replay import sort_events

DedupKey = tuple[str, str, str]


def merge(*sources: Iterable[Event]) -> list[Event]:
    """合并多个事件来源：按去重键保留首次出现的事件，再按 ts 稳定排序

    来源顺序即优先级，靠前的来源胜出（通常 remote 在前）。
    """
    seen: set[DedupKey] = set()
    merged: list[Event] = []
    for source in sources:
        for event in source:
            key = event.dedup_key
            if key in seen:
                continue
            seen.add(key)
            merged.append(event)
    return sort_events(merged)


class Changelog:
    """单个清单实例的事件工作集"""

    def __init__(
        self,
        events: Iterable[Event] = (),
        pending: Iterable[Event] = (),
    ) -> None:
        self._known: list[Event] = merge(events)
        self._confirmed: list[Event] = []
        self._pending: list[Event] = list(pending)
        # 最近一次观察到的远端事件数（含本实例已确认写入的事件）
        self.last_known_count: int = 0

    def __len__(self) -> int:
        return len(self._known) + len(self._confirmed) + len(self._pending)

    @property
    def known(self) -> list[Event]:
        """已知持久化的事件，按 replay 顺序（快照保存的部分）"""
        return self._known + self._confirmed

    @property
    def pending(self) -> list[Event]:
        """尚未确认的本地事件（按写入顺序）"""
        return list(self._pending)

    @property
    def events(self) -> list[Event]:
        """replay 使用的完整工作集，已按应用顺序排列"""
        return self._known + self._confirmed + self._pending

    def append_local(self, event: Event) -> None:
        """乐观写入：加入工作集末尾并标记为待确认"""
        self._pending.append(event)

    def confirm(self, event: Event) -> None:
        """存储端确认写入：转入 confirmed，并把这次写入计入已知远端数量

        同值的多个待确认事件按写入顺序逐个确认。
        """
        for index, candidate in enumerate(self._pending):
            if candidate is event or candidate == event:
                del self._pending[index]
                break
        else:
            return
        self._confirmed.append(event)
        self.last_known_count += 1

    def adopt_remote(self, remote: Iterable[Event]) -> None:
        """以远端集合为准刷新 known，保留未确认的本地事件

        调用方保证拉取发生在所有 confirmed 事件确认之后。
        """
        self._known = merge(remote)
        self._confirmed = []

    def replace(self, events: Iterable[Event], pending: Iterable[Event] = ()) -> None:
        """整体替换为远端集合（加载时使用）"""
        self._known = merge(events)
        self._confirmed = []
        self._pending = list(pending)

    def restore(self, events: Iterable[Event], pending: Iterable[Event] = ()) -> None:
        """从本地快照恢复，保持快照中的应用顺序"""
        self._known = list(events)
        self._confirmed = []
        self._pending = list(pending)

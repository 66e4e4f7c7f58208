"""Store Protocol 接口定义

定义远端事件存储、本地快照存储与渲染器的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol

from ..models.entity import Entity
from ..models.enums import ChangeHint, SyncStatus
from ..models.event import Event
from ..models.identity import ListIdentity
from .snapshot_store import Snapshot


class RemoteEventStore(Protocol):
    """远端事件存储接口（传输层实现，如 HttpEventStore）

    失败时抛出异常，由 EventStoreClient 统一降级处理。
    """

    async def fetch(self, identity: ListIdentity) -> list[Event]:
        """拉取指定清单的完整事件集合（有序或无序）"""
        ...

    async def append(self, identity: ListIdentity, event: Event) -> None:
        """追加一个事件（时间戳由存储端分配）"""
        ...


class SnapshotStore(Protocol):
    """本地降级快照接口"""

    async def save_snapshot(self, snapshot: Snapshot) -> None:
        """覆盖写入快照"""
        ...

    async def load_snapshot(self, identity: ListIdentity) -> Snapshot | None:
        """读取快照，不存在或不属于该清单时返回 None"""
        ...


class Renderer(Protocol):
    """渲染器接口 -- 负责全部展示，不得直接修改 Changelog"""

    def render(self, entities: list[Entity], change: ChangeHint) -> None:
        """渲染新的条目序列，change 提示可选择局部更新或整体重绘"""
        ...

    def sync_status(self, status: SyncStatus) -> None:
        """同步状态指示（非阻塞）"""
        ...


class NullRenderer:
    """不做任何展示的渲染器（无界面场景）"""

    def render(self, entities: list[Entity], change: ChangeHint) -> None:
        return None

    def sync_status(self, status: SyncStatus) -> None:
        return None

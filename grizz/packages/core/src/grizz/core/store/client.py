"""EventStoreClient -- 远端事件存储 + 本地快照降级

对引擎暴露不抛异常的接口：
- fetch(identity) -> 事件列表，失败返回 None
- append(identity, event) -> 是否成功
- load_snapshot / save_snapshot -> 本地持久槽位（远端不可达时的依据）

传输层异常（连接失败、payload 损坏等）在此统一记录并降级，不向调用方传播。
"""

import structlog

from ..models.event import Event
from ..models.identity import ListIdentity
from .protocols import RemoteEventStore, SnapshotStore
from .snapshot_store import Snapshot

log = structlog.get_logger()


class EventStoreClient:
    """事件存储客户端

    降级链: RemoteEventStore -> SnapshotStore
    """

    def __init__(
        self,
        remote: RemoteEventStore,
        snapshots: SnapshotStore | None = None,
    ) -> None:
        """初始化事件存储客户端

        Args:
            remote: 远端事件存储（HttpEventStore / MemoryEventStore）
            snapshots: 本地快照存储，None 表示不做本地持久化
        """
        self._remote = remote
        self._snapshots = snapshots

    async def fetch(self, identity: ListIdentity) -> list[Event] | None:
        """拉取远端完整事件集合

        Returns:
            事件列表；远端不可达或 payload 损坏时返回 None（整批丢弃，不部分信任）
        """
        try:
            return list(await self._remote.fetch(identity))
        except Exception as e:
            log.warning(
                "remote_fetch_failed",
                list_path=identity.path,
                error=str(e),
                error_type=type(e).__name__,
                recoverable=getattr(e, "recoverable", True),
            )
            return None

    async def append(self, identity: ListIdentity, event: Event) -> bool:
        """追加事件到远端

        Returns:
            True 表示存储端已确认持久化
        """
        try:
            await self._remote.append(identity, event)
            return True
        except Exception as e:
            log.warning(
                "remote_append_failed",
                list_path=identity.path,
                op=event.op,
                id=event.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def load_snapshot(self, identity: ListIdentity) -> Snapshot | None:
        """读取本地快照，读取失败视为无快照"""
        if self._snapshots is None:
            return None
        try:
            return await self._snapshots.load_snapshot(identity)
        except Exception as e:
            log.warning(
                "snapshot_load_failed",
                slot=identity.slot,
                error=str(e),
            )
            return None

    async def save_snapshot(
        self,
        identity: ListIdentity,
        events: list[Event],
        pending: list[Event],
    ) -> bool:
        """写入本地快照（尽力而为，失败只记录日志）"""
        if self._snapshots is None:
            return False
        try:
            await self._snapshots.save_snapshot(
                Snapshot(identity=identity, events=events, pending=pending)
            )
            return True
        except Exception as e:
            log.warning(
                "snapshot_save_failed",
                slot=identity.slot,
                error=str(e),
            )
            return False

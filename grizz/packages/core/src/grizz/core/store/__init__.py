"""Grizz Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

from pathlib import Path

import aiosqlite

from .client import EventStoreClient
from .event_store import SqliteEventStore
from .protocols import NullRenderer, RemoteEventStore, Renderer, SnapshotStore
from .snapshot_store import Snapshot, SqliteSnapshotStore
from .sqlite_init import init_db


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.event_store = SqliteEventStore(conn)
        self.snapshot_store = SqliteSnapshotStore(conn)


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "EventStoreClient",
    "SqliteEventStore",
    "SqliteSnapshotStore",
    "Snapshot",
    "RemoteEventStore",
    "SnapshotStore",
    "Renderer",
    "NullRenderer",
    "init_db",
]

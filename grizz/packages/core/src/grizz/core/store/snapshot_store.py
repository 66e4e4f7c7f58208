"""SnapshotStore SQLite 实现 -- 客户端本地降级快照

每个清单类型一个持久槽位，保存最近一次已知的完整事件集合（JSON 文本）
以及尚未被存储端确认的本地事件。快照只保存事件，不保存条目。
"""

import json

import aiosqlite
from pydantic import BaseModel, Field

from ..models.event import Event, make_timestamp
from ..models.identity import ListIdentity


class Snapshot(BaseModel):
    """本地快照"""

    identity: ListIdentity
    events: list[Event] = Field(default_factory=list)
    pending: list[Event] = Field(default_factory=list, description="未确认的本地事件")
    updated_at: str = Field(default_factory=make_timestamp)


class SqliteSnapshotStore:
    """SnapshotStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def save_snapshot(self, snapshot: Snapshot) -> None:
        """覆盖写入快照槽位并立即提交"""
        await self._conn.execute(
            """
            INSERT INTO snapshots (slot, identity, events, pending, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(slot) DO UPDATE SET
                identity = excluded.identity,
                events = excluded.events,
                pending = excluded.pending,
                updated_at = excluded.updated_at
            """,
            (
                snapshot.identity.slot,
                snapshot.identity.model_dump_json(),
                json.dumps(
                    [e.model_dump(mode="json") for e in snapshot.events],
                    ensure_ascii=False,
                ),
                json.dumps(
                    [e.model_dump(mode="json") for e in snapshot.pending],
                    ensure_ascii=False,
                ),
                snapshot.updated_at,
            ),
        )
        await self._conn.commit()

    async def load_snapshot(self, identity: ListIdentity) -> Snapshot | None:
        """读取快照；槽位为空或属于其他清单（如前一天）时返回 None"""
        cursor = await self._conn.execute(
            "SELECT identity, events, pending, updated_at FROM snapshots WHERE slot = ?",
            (identity.slot,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        snapshot = self._row_to_snapshot(row)
        if snapshot.identity != identity:
            return None
        return snapshot

    @staticmethod
    def _row_to_snapshot(row: aiosqlite.Row) -> Snapshot:
        """将数据库行转换为 Snapshot 模型"""
        return Snapshot(
            identity=ListIdentity.model_validate_json(row[0]),
            events=[Event(**e) for e in json.loads(row[1])],
            pending=[Event(**e) for e in json.loads(row[2])],
            updated_at=row[3],
        )

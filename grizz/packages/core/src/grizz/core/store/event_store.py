"""EventStore SQLite 实现 -- 存储端事件日志

事件表 append-only：只允许插入，不允许更新或删除。
ts 在持久化时由存储端分配（写入方的临时时间戳被忽略），同一进程内严格递增。
"""

import json
from collections.abc import Callable

import aiosqlite

from ..models.event import Event, make_timestamp, monotonic_timestamp
from ..models.identity import ListIdentity


class SqliteEventStore:
    """EventStore 的 SQLite 实现"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        clock: Callable[[], str] = make_timestamp,
    ) -> None:
        self._conn = conn
        self._clock = clock
        self._last_ts: str | None = None

    async def append_event(self, identity: ListIdentity, event: Event) -> Event:
        """追加事件（append-only），返回带权威时间戳的事件

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        self._last_ts = monotonic_timestamp(self._clock(), self._last_ts)
        stored = event.with_ts(self._last_ts)
        await self._conn.execute(
            """
            INSERT INTO events (owner, kind, list_key, ts, op, item_id, user, payload)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                identity.owner,
                identity.kind.value,
                identity.list_key,
                stored.ts,
                stored.op,
                None if stored.id is None else str(stored.id),
                stored.user,
                json.dumps(stored.payload, ensure_ascii=False),
            ),
        )
        return stored

    async def get_events(self, identity: ListIdentity) -> list[Event]:
        """查询指定清单的所有事件，按写入顺序"""
        cursor = await self._conn.execute(
            """
            SELECT ts, op, item_id, user, payload FROM events
            WHERE owner = ? AND kind = ? AND list_key = ?
            ORDER BY seq ASC
            """,
            (identity.owner, identity.kind.value, identity.list_key),
        )
        rows = await cursor.fetchall()
        return [self._row_to_event(row) for row in rows]

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> Event:
        """将数据库行转换为 Event 模型"""
        payload = json.loads(row[4]) if row[4] else {}
        return Event(
            ts=row[0],
            op=row[1],
            id=row[2],
            user=row[3],
            payload=payload,
        )

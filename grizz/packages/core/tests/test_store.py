"""SQLite Store 测试 -- 存储端事件日志与客户端快照槽位"""

import aiosqlite
from grizz.core.models import Event, ListIdentity
from grizz.core.store import SqliteEventStore, SqliteSnapshotStore, Snapshot
from grizz.core.store.sqlite_init import verify_wal_mode


def fixed_clock(*stamps: str):
    it = iter(stamps)
    return lambda: next(it)


class TestInit:
    async def test_wal_mode_enabled(self, db_conn: aiosqlite.Connection):
        assert await verify_wal_mode(db_conn) is True

    async def test_store_group_creates_directory(self, store_group, core_db_path):
        assert core_db_path.parent.is_dir()
        assert store_group.event_store is not None


class TestEventStore:
    async def test_append_assigns_store_timestamp(
        self, db_conn: aiosqlite.Connection, shopping_identity: ListIdentity
    ):
        store = SqliteEventStore(db_conn, clock=fixed_clock("2026-10-17T10:00:00.000Z"))
        stored = await store.append_event(
            shopping_identity,
            Event(op="added", id=1, ts="client-ts", user="u", payload={"text": "milk"}),
        )
        await db_conn.commit()
        assert stored.ts == "2026-10-17T10:00:00.000Z"

        events = await store.get_events(shopping_identity)
        assert events == [stored]

    async def test_events_scoped_by_identity(
        self,
        db_conn: aiosqlite.Connection,
        shopping_identity: ListIdentity,
        planner_identity: ListIdentity,
    ):
        store = SqliteEventStore(db_conn)
        await store.append_event(shopping_identity, Event(op="added", id=1, payload={"text": "a"}))
        await store.append_event(planner_identity, Event(op="added", id=1, payload={"text": "b"}))
        tomorrow = shopping_identity.model_copy(update={"list_key": "2026-10-18"})
        await db_conn.commit()

        assert len(await store.get_events(shopping_identity)) == 1
        assert await store.get_events(tomorrow) == []

    async def test_write_order_preserved(
        self, db_conn: aiosqlite.Connection, shopping_identity: ListIdentity
    ):
        store = SqliteEventStore(db_conn, clock=fixed_clock("t2", "t1"))
        await store.append_event(shopping_identity, Event(op="added", id=1))
        await store.append_event(shopping_identity, Event(op="removed", id=1))
        await db_conn.commit()
        assert [e.op for e in await store.get_events(shopping_identity)] == ["added", "removed"]

    async def test_same_millisecond_stamps_strictly_increase(
        self, db_conn: aiosqlite.Connection, shopping_identity: ListIdentity
    ):
        """同一毫秒内对同一条目的相同操作拿到不同的时间戳"""
        same = "2026-10-17T10:00:00.000Z"
        store = SqliteEventStore(db_conn, clock=lambda: same)
        first = await store.append_event(shopping_identity, Event(op="checked", id=1))
        second = await store.append_event(shopping_identity, Event(op="checked", id=1))
        await db_conn.commit()

        assert first.ts == same
        assert second.ts == "2026-10-17T10:00:00.001Z"
        assert first.dedup_key != second.dedup_key
        assert len(await store.get_events(shopping_identity)) == 2

    async def test_structured_payload_round_trip(
        self, db_conn: aiosqlite.Connection, shopping_identity: ListIdentity
    ):
        store = SqliteEventStore(db_conn)
        await store.append_event(
            shopping_identity,
            Event(op="reorder", payload={"order": [3, "x", 1]}),
        )
        await db_conn.commit()
        (event,) = await store.get_events(shopping_identity)
        assert event.payload == {"order": [3, "x", 1]}
        assert event.id is None


class TestSnapshotStore:
    async def test_missing_slot(self, db_conn, shopping_identity):
        assert await SqliteSnapshotStore(db_conn).load_snapshot(shopping_identity) is None

    async def test_save_and_load(self, db_conn, shopping_identity):
        store = SqliteSnapshotStore(db_conn)
        events = [Event(op="added", id=1, ts="t1", payload={"text": "milk"})]
        pending = [Event(op="checked", id=1, ts="t2")]
        await store.save_snapshot(
            Snapshot(identity=shopping_identity, events=events, pending=pending)
        )

        snapshot = await store.load_snapshot(shopping_identity)
        assert snapshot is not None
        assert snapshot.events == events
        assert snapshot.pending == pending

    async def test_one_slot_per_kind(self, db_conn, shopping_identity):
        """同类型的新清单覆盖旧槽位，旧清单的快照不会被误用"""
        store = SqliteSnapshotStore(db_conn)
        await store.save_snapshot(Snapshot(identity=shopping_identity))
        tomorrow = shopping_identity.model_copy(update={"list_key": "2026-10-18"})

        assert await store.load_snapshot(tomorrow) is None

        await store.save_snapshot(Snapshot(identity=tomorrow))
        assert await store.load_snapshot(shopping_identity) is None
        assert await store.load_snapshot(tomorrow) is not None

    async def test_kinds_do_not_share_slot(self, db_conn, shopping_identity, planner_identity):
        store = SqliteSnapshotStore(db_conn)
        await store.save_snapshot(Snapshot(identity=shopping_identity))
        await store.save_snapshot(Snapshot(identity=planner_identity))
        assert await store.load_snapshot(shopping_identity) is not None
        assert await store.load_snapshot(planner_identity) is not None

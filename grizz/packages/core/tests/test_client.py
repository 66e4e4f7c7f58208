"""EventStoreClient 降级测试 -- 传输异常不向调用方传播"""

from unittest.mock import AsyncMock

from grizz.core.models import Event
from grizz.core.store import EventStoreClient


class TestEventStoreClient:
    async def test_fetch_success(self, shopping_identity):
        remote = AsyncMock()
        remote.fetch.return_value = [Event(op="added", id=1)]
        client = EventStoreClient(remote)
        assert await client.fetch(shopping_identity) == [Event(op="added", id=1)]

    async def test_fetch_failure_returns_none(self, shopping_identity):
        remote = AsyncMock()
        remote.fetch.side_effect = ConnectionError("down")
        assert await EventStoreClient(remote).fetch(shopping_identity) is None

    async def test_append_failure_returns_false(self, shopping_identity):
        remote = AsyncMock()
        remote.append.side_effect = ConnectionError("down")
        client = EventStoreClient(remote)
        assert await client.append(shopping_identity, Event(op="added", id=1)) is False

    async def test_append_success(self, shopping_identity):
        remote = AsyncMock()
        client = EventStoreClient(remote)
        event = Event(op="added", id=1)
        assert await client.append(shopping_identity, event) is True
        remote.append.assert_awaited_once_with(shopping_identity, event)

    async def test_without_snapshot_store(self, shopping_identity):
        client = EventStoreClient(AsyncMock())
        assert await client.load_snapshot(shopping_identity) is None
        assert await client.save_snapshot(shopping_identity, [], []) is False

    async def test_snapshot_failures_swallowed(self, shopping_identity):
        snapshots = AsyncMock()
        snapshots.load_snapshot.side_effect = RuntimeError("disk")
        snapshots.save_snapshot.side_effect = RuntimeError("disk")
        client = EventStoreClient(AsyncMock(), snapshots)
        assert await client.load_snapshot(shopping_identity) is None
        assert await client.save_snapshot(shopping_identity, [], []) is False

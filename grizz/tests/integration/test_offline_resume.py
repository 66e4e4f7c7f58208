"""离线降级与恢复测试

测试内容：
1. 远端不可达时本地写入保留为 pending 并进入本地快照
2. 重新启动后从快照恢复，恢复连接后补发
3. 远端返回损坏数据时缓存保持不变
"""

from grizz.core.models import SyncStatus
from grizz.transport import MemoryEventStore


class TestOfflineResume:
    async def test_pending_survives_restart(self, make_engine, shopping_identity):
        store = MemoryEventStore()
        store.online = False

        offline = make_engine(shopping_identity, remote=store)
        await offline.load()
        assert offline.status == SyncStatus.OFFLINE

        await offline.add("milk")
        assert not await offline.flush()
        assert offline.status == SyncStatus.ERROR
        assert not await offline.aclose(timeout=1.0)

        store.online = True
        resumed = make_engine(shopping_identity, remote=store)
        await resumed.load()
        assert [e.text for e in resumed.entities] == ["milk"]
        assert len(resumed.changelog.pending) == 1

        await resumed.reconcile()
        assert not resumed.changelog.pending
        assert resumed.status == SyncStatus.SYNCED
        assert [r["text"] for r in store.records(shopping_identity)] == ["milk"]
        assert [e.text for e in resumed.entities] == ["milk"]

    async def test_malformed_fetch_keeps_cache(self, make_engine, shopping_identity):
        store = MemoryEventStore()
        engine = make_engine(shopping_identity, remote=store)
        await engine.load()
        await engine.add("eggs")
        await engine.flush()

        store.records(shopping_identity).append({"id": "9", "text": "no op"})
        await engine.reconcile()

        assert engine.status == SyncStatus.ERROR
        assert [e.text for e in engine.entities] == ["eggs"]

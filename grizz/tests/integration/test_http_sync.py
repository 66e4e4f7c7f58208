"""多写入方经 HTTP 同步测试

测试内容：
1. 两个写入方通过对账收敛到相同投影
2. reorder 等待确认后对其他写入方可见
3. planner 默认任务、喜好度与计分经线上格式往返
4. 后台对账循环拾取外部变更
"""

import asyncio

from grizz.core.domains.planner import total_score
from grizz.core.engine import seed_default_tasks
from grizz.core.models import ChangeHint, SyncStatus
from grizz.core.sync import ReconciliationLoop


class TestTwoWriters:
    async def test_writers_converge(self, make_engine, shopping_identity):
        alice = make_engine(shopping_identity, user="alice@testing.com")
        bob = make_engine(shopping_identity, user="bob@testing.com")
        await alice.load()
        await bob.load()

        await alice.add("milk")
        await alice.add("eggs")
        assert await alice.flush()

        change = await bob.reconcile()
        assert change == ChangeHint.STRUCTURAL
        assert [e.text for e in bob.entities] == ["eggs", "milk"]
        assert [e.id for e in bob.entities] == [e.id for e in alice.entities]

        milk = bob.entities[1].id
        await bob.toggle(milk)
        assert await bob.flush()

        await alice.reconcile()
        assert alice.entities[1].flag("checked")
        assert alice.status == SyncStatus.SYNCED
        assert bob.status == SyncStatus.SYNCED

    async def test_own_writes_do_not_rerender(self, make_engine, shopping_identity):
        engine = make_engine(shopping_identity)
        await engine.load()
        await engine.add("bread")
        assert await engine.flush()

        assert await engine.reconcile() == ChangeHint.NONE
        assert engine.changelog.last_known_count == 1

    async def test_reorder_visible_after_confirm(self, make_engine, shopping_identity):
        alice = make_engine(shopping_identity)
        bob = make_engine(shopping_identity)
        await alice.load()
        await alice.add("apples")
        await alice.add("pears")
        await alice.flush()

        ids = [e.id for e in alice.entities]
        await alice.reorder(list(reversed(ids)))
        assert not alice.changelog.pending

        await bob.load()
        assert [e.id for e in bob.entities] == list(reversed(ids))


class TestPlannerOverHttp:
    async def test_seed_complete_and_score(self, make_engine, planner_identity):
        engine = make_engine(planner_identity)
        await engine.load()
        await seed_default_tasks(engine)
        assert await engine.flush()
        assert engine.entities[0].text == "Check emails"
        assert len(engine.entities) == 6

        first = engine.entities[0].id
        await engine.set_enjoyment(first, 0)
        await engine.toggle(first)
        assert await engine.flush()

        fresh = make_engine(planner_identity)
        await fresh.load()
        task = fresh.entities[0]
        assert task.attr("enjoyment") == 0
        assert task.flag("completed")
        assert total_score(fresh.entities) == 600

    async def test_rename_round_trip(self, make_engine, planner_identity):
        engine = make_engine(planner_identity)
        await engine.load()
        await engine.rename("Monday")
        await engine.rename("Tuesday")
        await engine.flush()

        fresh = make_engine(planner_identity)
        await fresh.load()
        assert fresh.metadata.name == "Tuesday"


class TestReconciliationLoop:
    async def test_loop_picks_up_external_change(self, make_engine, shopping_identity):
        writer = make_engine(shopping_identity)
        reader = make_engine(shopping_identity)
        await writer.load()
        await reader.load()

        loop = ReconciliationLoop(reader, interval_s=0.01)
        loop.start()
        try:
            await writer.add("coffee")
            await writer.flush()

            async def wait_for_item() -> None:
                while not reader.entities:
                    await asyncio.sleep(0.01)

            await asyncio.wait_for(wait_for_item(), timeout=2.0)
        finally:
            await loop.stop()

        assert [e.text for e in reader.entities] == ["coffee"]
        assert not loop.running

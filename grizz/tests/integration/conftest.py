"""集成测试共享 fixture -- 引擎经 HTTP 连接真实的事件存储 app"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest_asyncio
from grizz.core.engine import ListEngine
from grizz.core.models import ListIdentity
from grizz.core.store import EventStoreClient, StoreGroup, create_store_group
from grizz.transport import HttpEventStore


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path):
    """集成测试用 FastAPI app（存储端）"""
    db_path = str(tmp_path / "server" / "events.db")
    os.environ["GRIZZ_DB_PATH"] = db_path

    from grizz.gateway.main import create_app

    app = create_app()
    store_group = await create_store_group(db_path)
    app.state.store_group = store_group

    yield app

    await store_group.conn.close()
    os.environ.pop("GRIZZ_DB_PATH", None)


@pytest_asyncio.fixture
async def local_stores(tmp_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """写入方本地数据库（降级快照）"""
    store_group = await create_store_group(str(tmp_path / "client" / "snapshots.db"))
    yield store_group
    await store_group.conn.close()


@pytest_asyncio.fixture
async def http_store(integration_app) -> AsyncGenerator[HttpEventStore, None]:
    store = HttpEventStore(
        base_url="http://test/api/lists",
        transport=httpx.ASGITransport(app=integration_app),
    )
    yield store
    await store.aclose()


@pytest_asyncio.fixture
async def make_engine(local_stores: StoreGroup, http_store: HttpEventStore):
    """引擎工厂：默认经 HTTP 访问存储端，共享同一本地快照库"""
    engines: list[ListEngine] = []

    def factory(identity: ListIdentity, remote=None, user: str | None = None) -> ListEngine:
        client = EventStoreClient(remote or http_store, local_stores.snapshot_store)
        engine = ListEngine(identity, client, user=user)
        engines.append(engine)
        return engine

    yield factory

    for engine in engines:
        await engine.aclose(timeout=1.0)

"""全局 pytest 配置 -- 临时 SQLite 数据库与通用事件 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from grizz.core.models import ListIdentity, ListKind


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from grizz.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    conn.row_factory = aiosqlite.Row
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def shopping_identity() -> ListIdentity:
    return ListIdentity(owner="test@testing.com", kind=ListKind.SHOPPING, list_key="2026-10-17")


@pytest.fixture
def planner_identity() -> ListIdentity:
    return ListIdentity(owner="test@testing.com", kind=ListKind.PLANNER, list_key="2026-10-17")

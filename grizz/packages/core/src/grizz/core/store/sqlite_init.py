"""SQLite 数据库初始化

PRAGMA 配置 + 两张表 DDL + 索引创建。
- events: 存储端 append-only 事件日志（参考服务使用）
- snapshots: 客户端本地降级快照（每个清单类型一个槽位）
使用 aiosqlite 异步操作。
"""

import aiosqlite

# events 表 DDL（只允许插入）
_EVENTS_DDL = """
CREATE TABLE IF NOT EXISTS events (
    seq         INTEGER PRIMARY KEY AUTOINCREMENT,
    owner       TEXT NOT NULL,
    kind        TEXT NOT NULL,
    list_key    TEXT NOT NULL,
    ts          TEXT NOT NULL,
    op          TEXT NOT NULL,
    item_id     TEXT,
    user        TEXT,
    payload     TEXT NOT NULL DEFAULT '{}'
);
"""

_EVENTS_INDEXES = [
    # 按清单读取全部事件
    "CREATE INDEX IF NOT EXISTS idx_events_list ON events(owner, kind, list_key, seq);",
]

# snapshots 表 DDL
_SNAPSHOTS_DDL = """
CREATE TABLE IF NOT EXISTS snapshots (
    slot        TEXT PRIMARY KEY,
    identity    TEXT NOT NULL,
    events      TEXT NOT NULL DEFAULT '[]',
    pending     TEXT NOT NULL DEFAULT '[]',
    updated_at  TEXT NOT NULL
);
"""


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_EVENTS_DDL)
    await conn.execute(_SNAPSHOTS_DDL)

    # 创建索引
    for idx_sql in _EVENTS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"

"""CLI 入口模块 -- python -m grizz.core <command>

支持的命令：
  replay <kind> <events.json>   由导出的事件集合打印当前条目
  log <events.json>             打印事件日志摘要
  show <kind> [list_key]        从本地事件库读取清单并打印当前条目
  sync <kind> [list_key]        与事件存储对账一次并打印当前条目
"""

import asyncio
import json
import sys
from pathlib import Path

from .config import get_db_path, get_flush_timeout_s, get_owner, get_snapshot_db_path
from .domains import get_domain
from .domains.planner import daily_report, total_score
from .domains.shopping import suggestions
from .eventlog import format_log, summarize_log
from .models.enums import ListKind
from .models.event import Event
from .models.identity import ListIdentity, today_key
from .models.wire import WireFormatError, from_wire
from .replay import replay, replay_metadata

USAGE = """用法: python -m grizz.core <command>
命令:
  replay <kind> <events.json>   由导出的事件集合打印当前条目
  log <events.json>             打印事件日志摘要
  show <kind> [list_key]        从本地事件库读取清单并打印当前条目
  sync <kind> [list_key]        与事件存储对账一次并打印当前条目"""

# CLI 展示的补全建议条数
SUGGESTION_LIMIT = 5


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command = sys.argv[1]
    args = sys.argv[2:]

    try:
        if command == "replay" and len(args) == 2:
            print_projection(args[0], load_events(args[1]))
        elif command == "log" and len(args) == 1:
            print(format_log(summarize_log(load_events(args[0]))))
        elif command == "show" and len(args) in (1, 2):
            asyncio.run(show(args[0], args[1] if len(args) == 2 else today_key()))
        elif command == "sync" and len(args) in (1, 2):
            asyncio.run(sync(args[0], args[1] if len(args) == 2 else today_key()))
        else:
            print(f"未知命令或参数错误: {' '.join(sys.argv[1:])}")
            print(USAGE)
            sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"错误: {e}")
        sys.exit(1)


def load_events(path: str) -> list[Event]:
    """读取线上格式（扁平 JSON 数组）导出的事件集合

    Raises:
        WireFormatError: 文件内容不是事件数组
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise WireFormatError("事件文件必须是 JSON 数组")
    return [from_wire(record) for record in data]


def print_projection(kind: str, events: list[Event], presorted: bool = False) -> None:
    """打印投影结果

    计划清单附带每日报告，购物清单附带补全建议。
    presorted=True 时按给定顺序 replay（引擎工作集已按应用顺序排列）。
    """
    domain = get_domain(kind)
    entities = replay(events, domain, presorted=presorted)
    metadata = replay_metadata(events, presorted=presorted)

    if metadata.name:
        print(f"清单: {metadata.name}")
    print(f"{len(events)} 条事件 -> {len(entities)} 个条目")
    for entity in entities:
        mark = "x" if entity.flag(domain.status_field) else " "
        extras = ", ".join(
            f"{key}={value}" for key, value in entity.attributes.items() if key != "text"
        )
        print(f"  [{mark}] {entity.id}  {entity.text}  ({extras})")
    if domain.kind == ListKind.PLANNER:
        print(f"得分: {total_score(entities)}")
        for line in daily_report(entities).lines:
            print(f"  {line}")
    elif domain.kind == ListKind.SHOPPING:
        ranked = suggestions(events, entities, SUGGESTION_LIMIT)
        if ranked:
            print("建议: " + ", ".join(f"{s.text} ({s.count})" for s in ranked))


async def show(kind: str, list_key: str) -> None:
    """从本地事件库读取清单"""
    from .store import create_store_group

    db_path = get_db_path()
    identity = ListIdentity(owner=get_owner(), kind=ListKind(kind), list_key=list_key)
    print(f"数据库路径: {db_path}")
    print(f"清单: {identity.path}")

    store_group = await create_store_group(db_path)
    try:
        events = await store_group.event_store.get_events(identity)
    finally:
        await store_group.conn.close()
    print_projection(kind, events)


async def sync(kind: str, list_key: str) -> None:
    """加载清单、执行一次对账并有界刷写本地待确认事件

    存储地址由 GRIZZ_STORE_URL / GRIZZ_STORE_MODE 决定，
    降级快照保存在 GRIZZ_SNAPSHOT_DB_PATH。
    """
    from grizz.transport import create_event_store

    from .engine import ListEngine
    from .store import EventStoreClient, create_store_group

    identity = ListIdentity(owner=get_owner(), kind=ListKind(kind), list_key=list_key)
    remote = create_event_store()
    local = await create_store_group(get_snapshot_db_path())
    engine = ListEngine(identity, EventStoreClient(remote, local.snapshot_store))
    try:
        await engine.load()
        await engine.reconcile()
        await engine.aclose(get_flush_timeout_s())
    finally:
        await local.conn.close()
        await remote.aclose()

    print(f"同步状态: {engine.status.value}")
    print(f"待确认: {len(engine.changelog.pending)}")
    print_projection(kind, engine.changelog.events, presorted=True)


if __name__ == "__main__":
    main()

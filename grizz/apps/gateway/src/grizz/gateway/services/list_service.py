"""ListEventService -- 清单事件日志读写业务逻辑

追加流程：
1. 解析线上记录为 Event（格式错误时抛 WireFormatError）
2. 分配权威时间戳并写入事件表
3. 提交事务，返回存储后的事件
"""

from collections.abc import Mapping
from typing import Any

import aiosqlite
import structlog
from grizz.core.models import Event, ListIdentity, from_wire, to_wire
from grizz.core.store import StoreGroup

log = structlog.get_logger()


class ListEventService:
    """清单事件业务服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def list_records(self, identity: ListIdentity) -> list[dict[str, str]]:
        """读取清单的完整事件集合（线上格式，带 timeStamp）"""
        events = await self._stores.event_store.get_events(identity)
        return [to_wire(event, include_ts=True) for event in events]

    async def append_record(
        self,
        identity: ListIdentity,
        record: Mapping[str, Any],
    ) -> Event:
        """追加一条线上记录

        Raises:
            WireFormatError: 记录缺少 op 或无法解析
        """
        event = from_wire(record)
        try:
            stored = await self._stores.event_store.append_event(identity, event)
            await self._stores.conn.commit()
        except aiosqlite.Error:
            await self._stores.conn.rollback()
            raise

        await log.ainfo(
            "list_event_appended",
            op=stored.op,
            id=stored.id,
            ts=stored.ts,
            user=stored.user,
        )
        return stored

"""ListEngine -- 单个清单实例的写入路径、对账与降级

一个 ListEngine 对应一个 ListIdentity，持有该清单的 Changelog、
最近一次投影以及同步状态。所有状态只在所属事件循环上修改。

写入路径（乐观）:
    构造事件 -> 写入缓存并标记 pending -> 保存本地快照 -> replay -> 渲染
    -> 转发存储端（默认后台，wait=True 时等待）

对账（reconcile）:
    重试 pending -> 拉取远端 -> 远端集合 + 未确认的 pending
    -> 远端数量变化时 replay + diff + 渲染
"""

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from ulid import ULID

from .changelog import Changelog
from .domains import ListDomain, get_domain, planner, shopping
from .domains.planner import DailyReport, default_task_payloads
from .domains.shopping import Suggestion
from .models.entity import Entity, ListMetadata
from .models.enums import ChangeHint, EventOp, ListKind, SyncStatus
from .models.event import EntityId, Event, make_timestamp
from .models.identity import ListIdentity
from .models.payloads import (
    ClearCompletedPayload,
    EnjoymentPayload,
    ItemAddedPayload,
    ListRenamedPayload,
    MovedPayload,
    ReorderPayload,
    TaskAddedPayload,
)
from .replay import diff_projection, replay, replay_metadata
from .store.client import EventStoreClient
from .store.protocols import NullRenderer, Renderer

log = structlog.get_logger()

_ADDED_PAYLOADS = {
    ListKind.SHOPPING: ItemAddedPayload,
    ListKind.PLANNER: TaskAddedPayload,
}


class ListEngine:
    """单个清单实例的事件引擎"""

    def __init__(
        self,
        identity: ListIdentity,
        client: EventStoreClient,
        renderer: Renderer | None = None,
        domain: ListDomain | None = None,
        user: str | None = None,
    ) -> None:
        """初始化引擎

        Args:
            identity: 清单身份
            client: 事件存储客户端（远端 + 本地快照）
            renderer: 渲染器，None 时不做展示
            domain: 清单类型规则，None 时按 identity.kind 选择
            user: 写入者标识，默认为清单所有者
        """
        self.identity = identity
        self.client = client
        self.renderer: Renderer = renderer or NullRenderer()
        self.domain = domain or get_domain(identity.kind)
        self.user = user or identity.owner

        self.changelog = Changelog()
        self.entities: list[Entity] = []
        self.metadata = ListMetadata()
        self.status = SyncStatus.IDLE
        self.dragging = False
        self.syncing = False

        self._tasks: set[asyncio.Task] = set()
        # 逐个按写入顺序转发，存储端分配的时间戳与本地顺序一致
        self._send_lock = asyncio.Lock()

    # ============================================================
    # 状态
    # ============================================================

    def _set_status(self, status: SyncStatus) -> None:
        if status == self.status:
            return
        self.status = status
        self.renderer.sync_status(status)

    @contextmanager
    def gesture(self) -> Iterator[None]:
        """拖拽手势期间暂停对账（tick 直接跳过）"""
        self.dragging = True
        try:
            yield
        finally:
            self.dragging = False

    def _project(self) -> ChangeHint:
        """重新 replay 缓存并返回相对上一次投影的变更提示"""
        old = self.entities
        events = self.changelog.events
        self.entities = replay(events, self.domain, presorted=True)
        self.metadata = replay_metadata(events, presorted=True)
        return diff_projection(old, self.entities)

    async def _save_snapshot(self) -> None:
        await self.client.save_snapshot(
            self.identity,
            self.changelog.known,
            self.changelog.pending,
        )

    # ============================================================
    # 加载 / 降级
    # ============================================================

    async def load(self) -> list[Entity]:
        """首次加载：优先远端，失败时回退到本地快照（离线模式）

        Returns:
            初始投影
        """
        snapshot = await self.client.load_snapshot(self.identity)
        pending = snapshot.pending if snapshot else []

        remote = await self.client.fetch(self.identity)
        if remote is not None:
            self.changelog.replace(remote, pending)
            self.changelog.last_known_count = len(remote)
            self._set_status(SyncStatus.SYNCED)
            await self._save_snapshot()
        elif snapshot is not None:
            self.changelog.restore(snapshot.events, pending)
            self._set_status(SyncStatus.OFFLINE)
            log.info(
                "list_loaded_from_snapshot",
                list_path=self.identity.path,
                events=len(snapshot.events),
                pending=len(pending),
            )
        else:
            self.changelog.replace([])
            self._set_status(SyncStatus.OFFLINE)
            log.info("list_loaded_empty", list_path=self.identity.path)

        self._project()
        self.renderer.render(self.entities, ChangeHint.STRUCTURAL)
        return self.entities

    # ============================================================
    # 写入路径
    # ============================================================

    async def submit(
        self,
        op: str,
        payload: dict[str, Any] | None = None,
        *,
        entity_id: EntityId | None = None,
        wait: bool = False,
    ) -> list[Entity]:
        """提交一个本地变更

        Args:
            op: 操作标签
            payload: 操作相关字段
            entity_id: 目标实体 ID（added 未指定时自动生成 ULID）
            wait: 是否等待存储端确认（reorder 提交时使用）

        Returns:
            乐观更新后的条目序列
        """
        if op == EventOp.ADDED and entity_id is None:
            entity_id = str(ULID())

        event = Event(
            op=op,
            id=entity_id,
            ts=make_timestamp(),
            user=self.user,
            payload=payload or {},
        )
        self.changelog.append_local(event)
        await self._save_snapshot()

        change = self._project()
        if change != ChangeHint.NONE:
            self.renderer.render(self.entities, change)

        if wait:
            await self._send_pending()
        else:
            task = asyncio.create_task(self._send_pending())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return self.entities

    async def _send_pending(self) -> bool:
        """按写入顺序转发 pending 事件，遇到失败即停止

        Returns:
            True 表示本轮全部转发成功
        """
        async with self._send_lock:
            ok = await self._drain()
        if ok and self.status == SyncStatus.ERROR:
            self._set_status(SyncStatus.SYNCED)
        return ok

    async def _drain(self) -> bool:
        # 调用方持有 _send_lock
        for event in self.changelog.pending:
            if not await self.client.append(self.identity, event):
                self._set_status(SyncStatus.ERROR)
                return False
            self.changelog.confirm(event)
            await self._save_snapshot()
        return True

    # ============================================================
    # 意图
    # ============================================================

    async def add(self, text: str, **attributes: Any) -> list[Entity]:
        """添加条目，缺省属性由清单类型补全"""
        payload = self.domain.prepare({"text": text, **attributes})
        model = _ADDED_PAYLOADS.get(self.domain.kind)
        if model is not None:
            payload = model(**payload).model_dump(exclude_none=True)
        return await self.submit(EventOp.ADDED, payload)

    async def remove(self, entity_id: EntityId) -> list[Entity]:
        return await self.submit(EventOp.REMOVED, entity_id=entity_id)

    async def toggle(self, entity_id: EntityId) -> list[Entity]:
        """切换完成状态（shopping: checked，planner: completed）"""
        set_op, clear_op = self.domain.toggle_ops
        field = self.domain.status_field
        current = next((e for e in self.entities if e.id == entity_id), None)
        op = clear_op if current is not None and current.flag(field) else set_op
        return await self.submit(op, entity_id=entity_id)

    async def reorder(self, order: list[EntityId], wait: bool = True) -> list[Entity]:
        """整体重排（默认等待存储端确认）"""
        payload = ReorderPayload(order=order).model_dump()
        return await self.submit(EventOp.REORDER, payload, wait=wait)

    async def move(
        self,
        entity_id: EntityId,
        *,
        to_index: int | None = None,
        after_id: EntityId | None = None,
    ) -> list[Entity]:
        payload = MovedPayload(to_index=to_index, after_id=after_id)
        return await self.submit(
            EventOp.MOVED,
            payload.model_dump(exclude_none=True),
            entity_id=entity_id,
        )

    async def set_enjoyment(self, entity_id: EntityId, value: int) -> list[Entity]:
        payload = EnjoymentPayload(value=value).model_dump()
        return await self.submit(EventOp.ENJOYMENT_UPDATE, payload, entity_id=entity_id)

    async def clear_completed(self) -> list[Entity]:
        """移除所有已完成条目；没有已完成条目时不写事件"""
        field = self.domain.status_field
        ids = [e.id for e in self.entities if e.flag(field)]
        if not ids:
            return self.entities
        payload = ClearCompletedPayload(ids=ids).model_dump()
        return await self.submit(EventOp.CLEAR_COMPLETED, payload)

    async def rename(self, name: str, hero_image: str | None = None) -> list[Entity]:
        """重命名清单（首次命名写 list_init）"""
        op = EventOp.LIST_RENAMED if self.metadata.name else EventOp.LIST_INIT
        payload = ListRenamedPayload(name=name, hero_image=hero_image)
        return await self.submit(op, payload.model_dump(exclude_none=True))

    # ============================================================
    # 派生视图
    # ============================================================

    def suggestions(self, limit: int | None = None) -> list[Suggestion]:
        """按历史勾选频次给出补全建议，排除当前已在清单上的条目"""
        return shopping.suggestions(self.changelog.events, self.entities, limit)

    def daily_report(self) -> DailyReport:
        """当前任务列表的每日报告"""
        return planner.daily_report(self.entities)

    # ============================================================
    # 对账
    # ============================================================

    async def reconcile(self) -> ChangeHint:
        """执行一次对账 tick

        Returns:
            本次 tick 产生的变更提示（跳过或无变化时为 NONE）
        """
        if self.dragging or self.syncing:
            return ChangeHint.NONE

        self.syncing = True
        self._set_status(SyncStatus.SYNCING)
        try:
            # 拉取期间不允许确认新写入，否则确认的事件会被这次较旧的远端集合覆盖
            async with self._send_lock:
                await self._drain()
                remote = await self.client.fetch(self.identity)
            if remote is None:
                # 拉取失败：缓存保持不变
                self._set_status(SyncStatus.ERROR)
                return ChangeHint.NONE

            self.changelog.adopt_remote(remote)
            change = ChangeHint.NONE
            if len(remote) != self.changelog.last_known_count:
                change = self._project()
                if change != ChangeHint.NONE:
                    self.renderer.render(self.entities, change)
                await log.adebug(
                    "remote_change_detected",
                    list_path=self.identity.path,
                    remote_count=len(remote),
                    last_known_count=self.changelog.last_known_count,
                    change=change,
                )
                self.changelog.last_known_count = len(remote)
            await self._save_snapshot()
            self._set_status(
                SyncStatus.ERROR if self.changelog.pending else SyncStatus.SYNCED
            )
            return change
        finally:
            self.syncing = False

    # ============================================================
    # 关闭
    # ============================================================

    async def flush(self) -> bool:
        """等待后台写入完成并重试 pending

        Returns:
            True 表示没有剩余的 pending 事件
        """
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        await self._send_pending()
        return not self.changelog.pending

    async def aclose(self, timeout: float = 2.0) -> bool:
        """有界刷写 pending；超时只记录日志，不抛出

        Returns:
            True 表示全部 pending 已确认
        """
        try:
            flushed = await asyncio.wait_for(self.flush(), timeout=timeout)
        except TimeoutError:
            flushed = False
            log.warning(
                "flush_timeout",
                list_path=self.identity.path,
                pending=len(self.changelog.pending),
                timeout_s=timeout,
            )
        if not flushed:
            await self._save_snapshot()
        return flushed


async def seed_default_tasks(engine: ListEngine) -> list[Entity]:
    """为空的 planner 清单写入默认任务（首个默认任务显示在最上方）"""
    if engine.entities:
        return engine.entities
    for payload in reversed(default_task_payloads()):
        await engine.add(**payload)
    return engine.entities

"""ReconciliationLoop -- 固定周期的对账循环

每个 ListEngine 一个后台 asyncio 任务，按固定间隔调用 engine.reconcile()。
单次 tick 的异常只记录日志，循环继续。
"""

import asyncio

import structlog

from .config import get_flush_timeout_s, get_poll_interval_s
from .engine import ListEngine

log = structlog.get_logger()


class ReconciliationLoop:
    """对账循环"""

    def __init__(
        self,
        engine: ListEngine,
        interval_s: float | None = None,
    ) -> None:
        self.engine = engine
        self.interval_s = interval_s if interval_s is not None else get_poll_interval_s()
        self._task: asyncio.Task | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """启动后台循环（重复调用无副作用）"""
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run())
        log.info(
            "reconciliation_started",
            list_path=self.engine.identity.path,
            interval_s=self.interval_s,
        )

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_s)
                break
            except TimeoutError:
                pass
            try:
                await self.engine.reconcile()
            except Exception as e:
                await log.aerror(
                    "reconciliation_tick_failed",
                    list_path=self.engine.identity.path,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    async def stop(self) -> None:
        """停止循环；正在进行的 tick 会执行完毕（不取消进行中的 I/O）"""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None
        log.info("reconciliation_stopped", list_path=self.engine.identity.path)

    async def aclose(self, timeout: float | None = None) -> bool:
        """停止循环并有界刷写 pending 事件"""
        await self.stop()
        return await self.engine.aclose(
            timeout if timeout is not None else get_flush_timeout_s()
        )

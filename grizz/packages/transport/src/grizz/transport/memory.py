"""MemoryEventStore -- 进程内事件存储

与 HttpEventStore 相同的线上语义（扁平记录、存储端分配 timeStamp），
用于离线开发与测试。online=False 时模拟存储不可达。
"""

from collections import defaultdict
from collections.abc import Callable

from grizz.core.models.event import Event, make_timestamp, monotonic_timestamp
from grizz.core.models.identity import ListIdentity
from grizz.core.models.wire import STORE_TS_KEY, WireFormatError, from_wire, to_wire

from .exceptions import MalformedPayloadError, StoreUnreachableError

MEMORY_URL = "memory://"


class MemoryEventStore:
    """RemoteEventStore 的内存实现"""

    def __init__(self, clock: Callable[[], str] = make_timestamp) -> None:
        self._clock = clock
        self._last_ts: str | None = None
        self._records: dict[str, list[dict]] = defaultdict(list)
        self.online = True

    def records(self, identity: ListIdentity) -> list[dict]:
        """某个清单的原始线上记录（可直接修改以模拟损坏数据）"""
        return self._records[identity.path]

    def _check_online(self, identity: ListIdentity) -> None:
        if not self.online:
            raise StoreUnreachableError(
                url=f"{MEMORY_URL}{identity.path}",
                original_error=ConnectionError("store offline"),
            )

    async def fetch(self, identity: ListIdentity) -> list[Event]:
        self._check_online(identity)
        try:
            return [from_wire(record) for record in self._records[identity.path]]
        except (WireFormatError, ValueError) as e:
            raise MalformedPayloadError(f"事件记录无法解析: {e}") from e

    async def append(self, identity: ListIdentity, event: Event) -> None:
        self._check_online(identity)
        record: dict = dict(to_wire(event))
        self._last_ts = monotonic_timestamp(self._clock(), self._last_ts)
        record[STORE_TS_KEY] = self._last_ts
        self._records[identity.path].append(record)

    async def aclose(self) -> None:
        """与 HttpEventStore 接口对齐（无外部资源需要释放）"""

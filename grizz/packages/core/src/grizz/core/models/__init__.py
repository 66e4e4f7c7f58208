"""Grizz Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .entity import Entity, ListMetadata
from .enums import (
    LIST_LEVEL_OPS,
    STATUS_OPS,
    ChangeHint,
    EventOp,
    ListKind,
    SyncStatus,
)
from .event import (
    EntityId,
    Event,
    FrozenPayload,
    make_timestamp,
    monotonic_timestamp,
    normalize_id,
)
from .identity import ListIdentity, today_key
from .payloads import (
    ClearCompletedPayload,
    EnjoymentPayload,
    ItemAddedPayload,
    ListRenamedPayload,
    MovedPayload,
    ReorderPayload,
    TaskAddedPayload,
)
from .wire import WireFormatError, from_wire, to_wire

__all__ = [
    # 枚举
    "EventOp",
    "ListKind",
    "SyncStatus",
    "ChangeHint",
    "STATUS_OPS",
    "LIST_LEVEL_OPS",
    # Event
    "Event",
    "EntityId",
    "normalize_id",
    "make_timestamp",
    "monotonic_timestamp",
    "FrozenPayload",
    # Entity
    "Entity",
    "ListMetadata",
    # Identity
    "ListIdentity",
    "today_key",
    # Payloads
    "ItemAddedPayload",
    "TaskAddedPayload",
    "ReorderPayload",
    "MovedPayload",
    "EnjoymentPayload",
    "ClearCompletedPayload",
    "ListRenamedPayload",
    # Wire
    "to_wire",
    "from_wire",
    "WireFormatError",
]

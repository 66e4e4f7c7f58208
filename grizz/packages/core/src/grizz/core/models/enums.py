"""枚举定义

包含事件操作标签 EventOp、清单类型 ListKind、同步状态 SyncStatus
以及渲染变更提示 ChangeHint。
"""

from enum import StrEnum


class EventOp(StrEnum):
    """事件操作标签（封闭词表，可按清单类型扩展，已有标签不得改作他用）"""

    # 实体生命周期
    ADDED = "added"
    REMOVED = "removed"

    # 状态切换
    CHECKED = "checked"
    UNCHECKED = "unchecked"
    COMPLETED = "completed"
    UNCOMPLETED = "uncompleted"

    # 排序
    REORDER = "reorder"
    MOVED = "moved"

    # 属性更新
    ENJOYMENT_UPDATE = "enjoyment-update"
    # planner 旧日志中的标签，语义同 ENJOYMENT_UPDATE
    ENJOYMENT = "enjoyment"

    # 批量移除（shopping "清除已勾选"）
    CLEAR_COMPLETED = "clear_completed"

    # 清单级元数据
    LIST_INIT = "list_init"
    LIST_RENAMED = "list_renamed"


# 清单级事件不对应任何实体
LIST_LEVEL_OPS: frozenset[str] = frozenset(
    {EventOp.LIST_INIT, EventOp.LIST_RENAMED}
)

# 状态切换事件 -> (状态字段, 取值)
STATUS_OPS: dict[str, tuple[str, bool]] = {
    EventOp.CHECKED: ("checked", True),
    EventOp.UNCHECKED: ("checked", False),
    EventOp.COMPLETED: ("completed", True),
    EventOp.UNCOMPLETED: ("completed", False),
}


class ListKind(StrEnum):
    """清单类型"""

    SHOPPING = "shopping"
    PLANNER = "planner"


class SyncStatus(StrEnum):
    """同步状态指示（非阻塞，仅供展示）"""

    IDLE = "idle"
    SYNCING = "syncing"
    SYNCED = "synced"
    ERROR = "error"
    OFFLINE = "offline"


class ChangeHint(StrEnum):
    """交给渲染器的变更提示 -- 仅为优化，replay 输出始终权威"""

    STRUCTURAL = "structural"
    STATUS_ONLY = "status-only"
    NONE = "none"

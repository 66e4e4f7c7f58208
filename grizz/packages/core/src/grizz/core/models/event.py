"""Event 数据模型

事件日志 append-only：事件一经创建不可修改，纠错只能追加补偿事件。
ts 为 ISO-8601 字符串，由存储端在持久化时分配；写入方在确认前可先打临时时间戳。
"""

import copy
import re
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 实体 ID：数字或不透明字符串，跨 replay 必须稳定
EntityId = int | str

_INTEGER_RE = re.compile(r"^-?\d+$")
_TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def normalize_id(value: Any) -> EntityId | None:
    """规范化实体 ID：数字字符串转为 int，空值返回 None，其余保持字符串"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else str(value)
    text = str(value).strip()
    if not text:
        return None
    if _INTEGER_RE.match(text):
        return int(text)
    return text


def make_timestamp(now: datetime | None = None) -> str:
    """生成与存储端同形的时间戳：YYYY-MM-DDTHH:MM:SS.mmmZ（UTC，毫秒精度）"""
    current = (now or datetime.now(UTC)).astimezone(UTC)
    return current.strftime("%Y-%m-%dT%H:%M:%S.") + f"{current.microsecond // 1000:03d}Z"


def monotonic_timestamp(ts: str, previous: str | None) -> str:
    """存储端时间戳严格递增：不晚于上一个时取上一个 + 1ms

    去重键含 ts，同一毫秒内对同一实体的相同操作必须拿到不同的时间戳。
    无法解析的时间戳原样返回。
    """
    if previous is None or ts > previous:
        return ts
    try:
        last = datetime.strptime(previous, _TS_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        return ts
    return make_timestamp(last + timedelta(milliseconds=1))


class FrozenPayload(dict):
    """只读 payload：构造后不允许增删改"""

    def _readonly(self, *args: Any, **kwargs: Any) -> None:
        raise TypeError("Event payload is read-only")

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

    def __reduce__(self):
        return (FrozenPayload, (dict(self),))

    def __copy__(self) -> "FrozenPayload":
        return self

    def __deepcopy__(self, memo: dict) -> "FrozenPayload":
        return self


class Event(BaseModel):
    """Event 数据模型 -- 一次状态变更的不可变记录

    op 保存为普通字符串，未知标签可原样往返（replay 时忽略）。
    """

    model_config = ConfigDict(frozen=True)

    op: str = Field(description="操作标签，见 EventOp")
    id: EntityId | None = Field(default=None, description="实体 ID，纯排序/清单级事件为空")
    ts: str | None = Field(default=None, description="ISO-8601 时间戳")
    user: str | None = Field(default=None, description="写入者标识")
    payload: dict[str, Any] = Field(
        default_factory=dict,
        validate_default=True,
        description="操作相关字段（只读）",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> EntityId | None:
        return normalize_id(value)

    @field_validator("payload", mode="after")
    @classmethod
    def _freeze_payload(cls, value: dict[str, Any]) -> dict[str, Any]:
        # 嵌套值深拷贝，调用方后续修改原 dict 不影响事件
        if isinstance(value, FrozenPayload):
            return value
        return FrozenPayload(copy.deepcopy(value))

    @property
    def dedup_key(self) -> tuple[str, str, str]:
        """去重键：(ts, op, id)"""
        return (self.ts or "", self.op, "" if self.id is None else str(self.id))

    def with_ts(self, ts: str) -> "Event":
        """返回替换时间戳后的新事件（原事件不变）"""
        return self.model_copy(update={"ts": ts})

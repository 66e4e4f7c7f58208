"""事件线上格式编解码

线上表示为扁平 key/value：
- 标量字段转为字符串；
- 非标量字段（如 order 数组）序列化为紧凑 JSON 文本，接收时仅对
  STRUCTURED_KEYS 中的字段解析回来，其余字段（如条目文本）原样保留为文本；
- 存储端分配的时间戳以 timeStamp 字段返回（兼容 ts）。
"""

import json
from collections.abc import Mapping
from typing import Any

from .event import Event

# 存储端时间戳字段名（优先）与本地字段名
STORE_TS_KEY = "timeStamp"
LOCAL_TS_KEY = "ts"

_ENVELOPE_KEYS = frozenset({"op", "id", "user", STORE_TS_KEY, LOCAL_TS_KEY})

# 携带结构化值（JSON 文本）的 payload 字段
STRUCTURED_KEYS = frozenset({"order", "ids"})


class WireFormatError(ValueError):
    """线上记录无法解析为 Event"""


def encode_value(value: Any) -> str:
    """将单个 payload 值编码为线上文本"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def decode_value(key: str, value: Any) -> Any:
    """解析单个线上值：结构化字段的 JSON 文本还原为结构，其余原样返回"""
    if key not in STRUCTURED_KEYS or not isinstance(value, str):
        return value
    text = value.strip()
    if text[:1] in ("[", "{"):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return value
    return value


def to_wire(event: Event, include_ts: bool = False) -> dict[str, str]:
    """Event -> 扁平 key/value

    Args:
        event: 要编码的事件
        include_ts: 是否带上时间戳（追加请求不带，由存储端分配）
    """
    fields: dict[str, str] = {"op": event.op}
    if event.id is not None:
        fields["id"] = str(event.id)
    if event.user:
        fields["user"] = event.user
    for key, value in event.payload.items():
        if value is None or key in _ENVELOPE_KEYS:
            continue
        fields[key] = encode_value(value)
    if include_ts and event.ts:
        fields[STORE_TS_KEY] = event.ts
    return fields


def from_wire(record: Mapping[str, Any]) -> Event:
    """扁平 key/value -> Event

    Raises:
        WireFormatError: 记录不是映射或缺少 op
    """
    if not isinstance(record, Mapping):
        raise WireFormatError(f"事件记录必须是对象，实际为 {type(record).__name__}")

    op = record.get("op")
    if not isinstance(op, str) or not op:
        raise WireFormatError(f"事件记录缺少 op: {dict(record)!r}")

    ts = record.get(STORE_TS_KEY) or record.get(LOCAL_TS_KEY) or None
    user = record.get("user") or None
    payload = {
        key: decode_value(key, value)
        for key, value in record.items()
        if key not in _ENVELOPE_KEYS and value is not None and value != ""
    }
    return Event(
        op=op,
        id=record.get("id"),
        ts=str(ts) if ts is not None else None,
        user=str(user) if user is not None else None,
        payload=payload,
    )

"""事件日志摘要 -- 调试用的日志查看与导出

summarize_log 输出：
- 事件总数与按操作计数（按频次降序）
- 按 ts 倒序排列的行，行号从总数递减到 1
- 每行的 details 为 payload 字段拼接，超长值截断
"""

import json
from collections import Counter
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .config import LOG_DETAIL_MAX_CHARS
from .models.event import Event

_EMPTY = "—"


class LogRow(BaseModel):
    """日志表中的一行"""

    number: int
    ts: str
    op: str
    id: str
    user: str
    details: str


class LogSummary(BaseModel):
    """事件日志摘要"""

    total: int = 0
    op_counts: list[tuple[str, int]] = Field(default_factory=list)
    rows: list[LogRow] = Field(default_factory=list)

    @property
    def stats_line(self) -> str:
        parts = [f"{self.total} events total"]
        parts.extend(f"{op}: {count}" for op, count in self.op_counts)
        return " · ".join(parts)


def _truncate(text: str, limit: int = LOG_DETAIL_MAX_CHARS) -> str:
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text


def format_details(payload: dict[str, Any]) -> str:
    """payload 字段拼接为 key: value 列表，空值跳过"""
    details = []
    for key, value in payload.items():
        if value is None or value == "":
            continue
        if isinstance(value, (dict, list)):
            display = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        else:
            display = str(value)
        details.append(f"{key}: {_truncate(display)}")
    return ", ".join(details) or _EMPTY


def format_timestamp(ts: str | None) -> str:
    """时间戳格式化为 'Mar 5, 14:03:22'，无法解析时原样返回"""
    if not ts:
        return _EMPTY
    try:
        parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return ts
    return f"{parsed:%b} {parsed.day}, {parsed:%H:%M:%S}"


def summarize_log(events: Iterable[Event]) -> LogSummary:
    """生成事件日志摘要"""
    items = list(events)
    counts = Counter(event.op for event in items)
    newest_first = sorted(items, key=lambda event: event.ts or "", reverse=True)
    rows = [
        LogRow(
            number=len(newest_first) - idx,
            ts=format_timestamp(event.ts),
            op=event.op,
            id=_EMPTY if event.id is None else str(event.id),
            user=event.user or _EMPTY,
            details=format_details(event.payload),
        )
        for idx, event in enumerate(newest_first)
    ]
    return LogSummary(
        total=len(items),
        op_counts=counts.most_common(),
        rows=rows,
    )


def format_log(summary: LogSummary) -> str:
    """摘要渲染为纯文本表格"""
    lines = [summary.stats_line]
    if not summary.rows:
        lines.append("No events recorded yet")
        return "\n".join(lines)
    for row in summary.rows:
        lines.append(
            f"{row.number:>4}  {row.ts:<18} {row.op:<16} {row.id:<28} {row.user:<20} {row.details}"
        )
    return "\n".join(lines)


def export_json(events: Iterable[Event]) -> str:
    """导出完整事件集合为缩进 JSON（复制到剪贴板的等价物）"""
    return json.dumps(
        [event.model_dump(mode="json") for event in events],
        indent=2,
        ensure_ascii=False,
    )

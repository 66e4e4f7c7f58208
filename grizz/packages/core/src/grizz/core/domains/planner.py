"""Planner 清单规则

计划任务：text + time + color + enjoyment，completed/uncompleted 切换，
moved 增量排序，enjoyment-update 更新喜好度。
另提供任务计分、时长解析、每日报告与默认任务生成。
"""

import math
import re
from typing import Any

from pydantic import BaseModel, Field

from ..models.entity import Entity
from ..models.enums import EventOp, ListKind
from ..models.event import Event
from .base import ListDomain

DEFAULT_TIME = "1h"
DEFAULT_ENJOYMENT = 2
# 日程从早上 9 点开始排
DAY_START_MINUTES = 9 * 60

COLORS: tuple[str, ...] = (
    "#ff6b35",  # orange
    "#00d9c0",  # teal
    "#ff2e63",  # pink
    "#ffc93c",  # yellow
    "#a855f7",  # purple
    "#4ade80",  # green
    "#38bdf8",  # blue
)

# 时长 -> 基础分
TIME_POINTS: dict[str, int] = {
    "15m": 100,
    "30m": 200,
    "45m": 300,
    "1h": 400,
    "1.5h": 600,
    "2h": 800,
    "3h": 1200,
    "4h+": 1600,
}

# 喜好度 -> 倍率（越不喜欢的任务完成后得分越高）
ENJOYMENT_MULTIPLIERS: dict[int, float] = {
    0: 6,
    1: 4,
    2: 2.5,
    3: 1.5,
    4: 1,
}

DEFAULT_TASKS: tuple[tuple[str, str], ...] = (
    ("Check emails", "15m"),
    ("Process incoming shipments", "45m"),
    ("Update tracking spreadsheet", "30m"),
    ("Schedule outbound pickups", "20m"),
    ("Verify package labels", "30m"),
    ("Follow up on delayed deliveries", "30m"),
)


def _enjoyment(value: Any) -> int:
    return int(value)


def _task_factory(event: Event) -> Entity:
    payload = event.payload
    enjoyment = payload.get("enjoyment")
    return Entity(
        id=event.id,
        attributes={
            "text": payload.get("text", ""),
            "time": payload.get("time") or DEFAULT_TIME,
            "color": payload.get("color") or COLORS[0],
            "enjoyment": PLANNER.coerce(
                "enjoyment",
                DEFAULT_ENJOYMENT if enjoyment is None else enjoyment,
            ),
        },
        status={"completed": False},
    )


def _prepare(payload: dict[str, Any]) -> dict[str, Any]:
    defaults = {"time": DEFAULT_TIME, "enjoyment": DEFAULT_ENJOYMENT}
    if "color" not in payload:
        # 按文本稳定取色，同一任务重复添加颜色不变
        defaults["color"] = COLORS[sum(map(ord, str(payload.get("text", "")))) % len(COLORS)]
    return {**defaults, **payload}


PLANNER = ListDomain(
    kind=ListKind.PLANNER,
    entity_factory=_task_factory,
    toggle_ops=(EventOp.COMPLETED, EventOp.UNCOMPLETED),
    attribute_ops={
        EventOp.ENJOYMENT_UPDATE: ("enjoyment", "value"),
        EventOp.ENJOYMENT: ("enjoyment", "value"),
    },
    coercers={"enjoyment": _enjoyment},
    prepare=_prepare,
)


def task_score(task: Entity) -> int:
    """单个任务得分 = 时长基础分 × 喜好度倍率（四舍五入）"""
    base_points = TIME_POINTS.get(str(task.attr("time")), TIME_POINTS[DEFAULT_TIME])
    enjoyment = task.attr("enjoyment", DEFAULT_ENJOYMENT)
    multiplier = ENJOYMENT_MULTIPLIERS.get(enjoyment, ENJOYMENT_MULTIPLIERS[DEFAULT_ENJOYMENT])
    return round(base_points * multiplier)


def total_score(tasks: list[Entity]) -> int:
    """已完成任务的总分"""
    return sum(task_score(task) for task in tasks if task.flag("completed"))


_HOURS_RE = re.compile(r"([\d.]+)\s*h")
_MINUTES_RE = re.compile(r"(\d+)\s*m")
_NUMBER_RE = re.compile(r"(\d+)")


def parse_time_to_minutes(time_str: str) -> int:
    """解析时长文本为分钟数（如 1.5h / 45m / 1h 30m），无法解析时按 30 分钟计"""
    text = time_str.lower().strip()
    minutes = 0.0

    hour_match = _HOURS_RE.search(text)
    if hour_match:
        try:
            minutes += float(hour_match.group(1)) * 60
        except ValueError:
            hour_match = None

    minute_match = _MINUTES_RE.search(text)
    if minute_match:
        minutes += int(minute_match.group(1))

    if not hour_match and not minute_match:
        number_match = _NUMBER_RE.search(text)
        if number_match:
            minutes = int(number_match.group(1))

    return int(minutes) or 30


def format_duration(minutes: int) -> str:
    """分钟数格式化为 1h 30m / 2h / 45m"""
    if minutes >= 60:
        hours, mins = divmod(minutes, 60)
        return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"
    return f"{minutes}m"


def default_task_payloads() -> list[dict[str, Any]]:
    """默认任务的 added payload（按展示顺序）"""
    return [
        {"text": text, "time": time, "color": COLORS[i % len(COLORS)]}
        for i, (text, time) in enumerate(DEFAULT_TASKS)
    ]


def format_clock_time(total_minutes: int) -> str:
    """当天分钟数格式化为 12 小时制钟点（如 9:00 AM / 1:30 PM）"""
    hours, mins = divmod(total_minutes, 60)
    if hours > 12:
        hour12 = hours - 12
    elif hours == 0:
        hour12 = 12
    else:
        hour12 = hours
    suffix = "PM" if hours >= 12 else "AM"
    return f"{hour12}:{mins:02d} {suffix}"


class ScheduleSlot(BaseModel):
    """日程中的一个任务时段"""

    text: str
    start: str = Field(description="开始时间（12 小时制）")
    duration: str
    completed: bool = False


class DailyReport(BaseModel):
    """计划清单的每日报告"""

    total: int = 0
    completed: int = 0
    completion_rate: int = Field(default=0, description="完成百分比，空清单为 0")
    planned_minutes: int = 0
    invested_minutes: int = 0
    schedule: list[ScheduleSlot] = Field(default_factory=list)

    @property
    def remaining_minutes(self) -> int:
        return self.planned_minutes - self.invested_minutes

    @property
    def all_complete(self) -> bool:
        return self.total > 0 and self.completed == self.total

    @property
    def progress_label(self) -> str:
        if self.completion_rate >= 80:
            return "Excellent progress"
        if self.completion_rate >= 50:
            return "Good progress"
        return "In progress"

    @property
    def lines(self) -> list[str]:
        """报告的文本行（CLI 展示用）"""
        if self.total == 0:
            return ["No tasks scheduled for today"]
        remaining = (
            "All tasks complete"
            if self.remaining_minutes == 0
            else f"{format_duration(self.remaining_minutes)} remaining"
        )
        return [
            f"Tasks completed: {self.completed}/{self.total}",
            f"Completion rate: {self.completion_rate}% ({self.progress_label})",
            f"Time invested: {format_duration(self.invested_minutes)}"
            f" of {format_duration(self.planned_minutes)} planned",
            f"Time remaining: {remaining}",
        ]


def daily_report(tasks: list[Entity]) -> DailyReport:
    """按当前任务列表生成每日报告，日程从 9:00 AM 起按任务时长顺排"""
    schedule: list[ScheduleSlot] = []
    planned = invested = completed = 0
    clock = DAY_START_MINUTES
    for task in tasks:
        minutes = parse_time_to_minutes(str(task.attr("time", DEFAULT_TIME)))
        done = task.flag("completed")
        schedule.append(
            ScheduleSlot(
                text=str(task.attr("text", "")),
                start=format_clock_time(clock),
                duration=format_duration(minutes),
                completed=done,
            )
        )
        clock += minutes
        planned += minutes
        if done:
            completed += 1
            invested += minutes

    total = len(tasks)
    return DailyReport(
        total=total,
        completed=completed,
        completion_rate=math.floor(completed / total * 100 + 0.5) if total else 0,
        planned_minutes=planned,
        invested_minutes=invested,
        schedule=schedule,
    )

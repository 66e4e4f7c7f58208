"""Event Payload 子类型

写入路径按操作构造结构化 payload，再以 model_dump(exclude_none=True) 落入 Event。
新增字段必须带默认值，保证旧事件可正常反序列化。
"""

from pydantic import BaseModel, Field

from .event import EntityId


class ItemAddedPayload(BaseModel):
    """shopping added 事件 payload"""

    text: str
    category: str = Field(default="other")


class TaskAddedPayload(BaseModel):
    """planner added 事件 payload"""

    text: str
    time: str = Field(default="1h", description="预估时长，如 15m / 1.5h / 4h+")
    color: str = Field(default="#ff6b35")
    enjoyment: int = Field(default=2, ge=0, le=4, description="0 讨厌 ... 4 喜欢")


class ReorderPayload(BaseModel):
    """reorder 事件 payload -- 完整的新顺序"""

    order: list[EntityId]


class MovedPayload(BaseModel):
    """moved 事件 payload -- to_index 优先，其次 after_id，均为空则移到末尾"""

    to_index: int | None = Field(default=None)
    after_id: EntityId | None = Field(default=None)


class EnjoymentPayload(BaseModel):
    """enjoyment-update 事件 payload"""

    value: int = Field(ge=0, le=4)


class ClearCompletedPayload(BaseModel):
    """clear_completed 事件 payload -- 事件发生时已勾选的条目"""

    ids: list[EntityId]


class ListRenamedPayload(BaseModel):
    """list_init / list_renamed 事件 payload"""

    name: str
    hero_image: str | None = Field(default=None)

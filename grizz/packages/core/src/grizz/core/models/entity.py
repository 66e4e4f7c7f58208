"""Entity / ListMetadata 数据模型

Entity 是事件日志的实时投影（projection），只能由 replay 产生，
任何持久化的 Entity 表示都不具权威性。
"""

from typing import Any

from pydantic import BaseModel, Field

from .event import EntityId


class Entity(BaseModel):
    """清单条目（购物项 / 计划任务）"""

    id: EntityId = Field(description="与产生它的 added 事件 id 一致")
    attributes: dict[str, Any] = Field(
        default_factory=dict,
        description="text / category / time / color / enjoyment 等属性",
    )
    status: dict[str, bool] = Field(
        default_factory=dict,
        description="checked / completed 等布尔状态",
    )

    @property
    def text(self) -> str:
        return str(self.attributes.get("text") or "")

    def attr(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def flag(self, name: str) -> bool:
        return self.status.get(name, False)


class ListMetadata(BaseModel):
    """清单元数据（由 list_init / list_renamed 事件折叠得到）"""

    name: str = Field(default="", description="清单名称")
    hero_image: str | None = Field(default=None, description="封面图路径")

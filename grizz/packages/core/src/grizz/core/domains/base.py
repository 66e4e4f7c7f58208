"""ListDomain -- 清单类型的 replay 规则

每个清单类型声明：
- entity_factory: 由 added 事件构造 Entity
- toggle_ops: 切换状态时使用的 (置位, 复位) 操作标签
- attribute_ops: 属性更新事件 -> (属性名, payload 字段)
- coercers: 属性值规范化（线上值均为文本）
- prepare: 写入 added 事件前补全默认属性
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..models.entity import Entity
from ..models.enums import STATUS_OPS, EventOp, ListKind
from ..models.event import Event


def _identity(payload: dict[str, Any]) -> dict[str, Any]:
    return payload


def generic_entity(event: Event) -> Entity:
    """未指定清单类型时的默认构造：payload 原样作为属性"""
    return Entity(id=event.id, attributes=dict(event.payload))


@dataclass(frozen=True)
class ListDomain:
    """清单类型的 replay / 写入规则"""

    kind: ListKind | None
    entity_factory: Callable[[Event], Entity] = generic_entity
    toggle_ops: tuple[str, str] = (EventOp.CHECKED, EventOp.UNCHECKED)
    attribute_ops: Mapping[str, tuple[str, str]] = field(
        default_factory=lambda: {EventOp.ENJOYMENT_UPDATE: ("enjoyment", "value")}
    )
    coercers: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    prepare: Callable[[dict[str, Any]], dict[str, Any]] = _identity

    @property
    def status_field(self) -> str:
        """toggle 影响的状态字段"""
        return STATUS_OPS[self.toggle_ops[0]][0]

    def coerce(self, name: str, value: Any) -> Any:
        """规范化属性值；转换失败时保留原值"""
        coercer = self.coercers.get(name)
        if coercer is None:
            return value
        try:
            return coercer(value)
        except (TypeError, ValueError):
            return value


GENERIC = ListDomain(kind=None)

"""Replay 引擎 -- 由事件集合重建实时条目序列

纯函数：相同输入（去重后）永远得到相同输出。
1. 按 ts 字符串升序稳定排序（缺失 ts 视为空串，相同 ts 保持输入顺序）
2. 依次把事件折叠进 id -> Entity 映射和独立的顺序列表
3. 按顺序列表映射出条目，丢弃无法解析的 id
"""

import json
from collections.abc import Iterable
from typing import Any

import structlog

from .domains import GENERIC, ListDomain
from .models.entity import Entity, ListMetadata
from .models.enums import LIST_LEVEL_OPS, STATUS_OPS, ChangeHint, EventOp
from .models.event import EntityId, Event, normalize_id

log = structlog.get_logger()


def sort_events(events: Iterable[Event]) -> list[Event]:
    """按 ts 升序稳定排序（ISO-8601 字符串可直接按字典序比较）"""
    return sorted(events, key=lambda event: event.ts or "")


def _first(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None and value != "":
            return value
    return None


def _id_list(value: Any) -> list[EntityId]:
    """解析 id 序列：列表或其 JSON 文本，元素统一规范化"""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, (list, tuple)):
        return []
    ids = [normalize_id(item) for item in value]
    return [entity_id for entity_id in ids if entity_id is not None]


def _discard(order: list[EntityId], entity_id: EntityId) -> None:
    if entity_id in order:
        order.remove(entity_id)


def apply_event(
    entities: dict[EntityId, Entity],
    order: list[EntityId],
    event: Event,
    domain: ListDomain = GENERIC,
) -> None:
    """将单个事件应用到条目映射和顺序列表（就地修改）

    引用不存在条目的事件静默忽略；未知操作静默忽略。

    Args:
        entities: id -> Entity 映射
        order: 展示顺序（id 列表）
        event: 要应用的事件
        domain: 清单类型规则
    """
    op = event.op
    entity_id = event.id

    if op == EventOp.ADDED:
        if entity_id is None:
            log.debug("replay_added_without_id", ts=event.ts)
            return
        # 后到的 added 覆盖先前条目，并移到最前（新条目在顶部）
        entities[entity_id] = domain.entity_factory(event)
        _discard(order, entity_id)
        order.insert(0, entity_id)

    elif op == EventOp.REMOVED:
        entities.pop(entity_id, None)
        _discard(order, entity_id)

    elif op == EventOp.CLEAR_COMPLETED:
        for removed_id in _id_list(event.payload.get("ids")):
            entities.pop(removed_id, None)
            _discard(order, removed_id)

    elif op in STATUS_OPS:
        if entity_id in entities:
            field, value = STATUS_OPS[op]
            entity = entities[entity_id]
            entities[entity_id] = entity.model_copy(
                update={"status": {**entity.status, field: value}}
            )

    elif op == EventOp.REORDER:
        # 整体替换顺序，过滤掉已不存在（或从未存在）的 id
        seen: set[EntityId] = set()
        new_order: list[EntityId] = []
        for ordered_id in _id_list(event.payload.get("order")):
            if ordered_id in entities and ordered_id not in seen:
                seen.add(ordered_id)
                new_order.append(ordered_id)
        order[:] = new_order

    elif op == EventOp.MOVED:
        if entity_id not in entities:
            return
        _discard(order, entity_id)
        to_index = _first(event.payload, "to_index", "toIndex")
        after_id = normalize_id(_first(event.payload, "after_id", "afterId"))
        if to_index is not None:
            try:
                order.insert(max(0, int(to_index)), entity_id)
                return
            except (TypeError, ValueError):
                log.debug("replay_moved_bad_index", id=entity_id, to_index=to_index)
        if after_id is not None:
            # 锚点不存在时插到最前
            anchor = order.index(after_id) if after_id in order else -1
            order.insert(anchor + 1, entity_id)
        else:
            order.append(entity_id)

    elif op in domain.attribute_ops:
        if entity_id in entities:
            attribute, payload_key = domain.attribute_ops[op]
            if payload_key not in event.payload:
                return
            entity = entities[entity_id]
            value = domain.coerce(attribute, event.payload[payload_key])
            entities[entity_id] = entity.model_copy(
                update={"attributes": {**entity.attributes, attribute: value}}
            )

    elif op in LIST_LEVEL_OPS:
        # 清单级事件由 replay_metadata 处理
        return

    else:
        log.debug("replay_unknown_op_ignored", op=op, id=entity_id)


def replay(
    events: Iterable[Event],
    domain: ListDomain = GENERIC,
    *,
    presorted: bool = False,
) -> list[Entity]:
    """由事件集合重建有序条目序列

    调用方负责先去重（见 changelog.merge）。

    Args:
        events: 事件集合（有序或无序）
        domain: 清单类型规则
        presorted: 按给定顺序应用，不再按 ts 排序（Changelog.events 已排好）

    Returns:
        按展示顺序排列的实时条目
    """
    entities: dict[EntityId, Entity] = {}
    order: list[EntityId] = []
    for event in events if presorted else sort_events(events):
        apply_event(entities, order, event, domain)
    return [entities[entity_id] for entity_id in order if entity_id in entities]


def replay_metadata(events: Iterable[Event], *, presorted: bool = False) -> ListMetadata:
    """折叠清单级事件得到元数据（后写覆盖先写）"""
    metadata = ListMetadata()
    for event in events if presorted else sort_events(events):
        if event.op not in LIST_LEVEL_OPS:
            continue
        update: dict[str, Any] = {}
        name = event.payload.get("name")
        if name:
            update["name"] = str(name)
        hero_image = _first(event.payload, "hero_image", "heroImage")
        if hero_image:
            update["hero_image"] = str(hero_image)
        if update:
            metadata = metadata.model_copy(update=update)
    return metadata


def diff_projection(old: list[Entity], new: list[Entity]) -> ChangeHint:
    """比较新旧投影，给出渲染器变更提示

    - 条目集合/顺序/属性变化 -> STRUCTURAL（整体重绘）
    - 仅状态标记变化 -> STATUS_ONLY（局部更新）
    - 无变化 -> NONE
    """
    if [entity.id for entity in old] != [entity.id for entity in new]:
        return ChangeHint.STRUCTURAL
    if any(a.attributes != b.attributes for a, b in zip(old, new, strict=True)):
        return ChangeHint.STRUCTURAL
    if any(a.status != b.status for a, b in zip(old, new, strict=True)):
        return ChangeHint.STATUS_ONLY
    return ChangeHint.NONE

"""Shopping 清单规则

购物项：text + category，checked/unchecked 切换，clear_completed 批量清除。
另提供关键字分类与基于历史勾选次数的补全建议。
"""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from ..models.entity import Entity
from ..models.enums import EventOp, ListKind
from ..models.event import Event
from .base import ListDomain

DEFAULT_CATEGORY = "other"

# 分类 -> (展示名, 关键字)
CATEGORIES: dict[str, tuple[str, tuple[str, ...]]] = {
    "produce": ("Produce", (
        "apple", "banana", "orange", "tomato", "lettuce", "spinach", "carrot",
        "onion", "garlic", "potato", "avocado", "lemon", "lime", "grape",
        "strawberry", "blueberry", "broccoli", "cucumber", "pepper", "mushroom",
        "celery", "fruit", "vegetable", "salad", "citrus",
    )),
    "dairy": ("Dairy", ("milk", "cheese", "yogurt", "butter", "cream", "egg", "eggs")),
    "meat": ("Meat & Seafood", (
        "chicken", "beef", "pork", "fish", "salmon", "shrimp", "bacon",
        "sausage", "steak", "turkey", "ham",
    )),
    "bakery": ("Bakery", (
        "bread", "bagel", "muffin", "croissant", "roll", "bun", "cake", "pie",
        "donut", "pastry",
    )),
    "frozen": ("Frozen", ("ice cream", "frozen", "pizza", "popsicle")),
    "pantry": ("Pantry", (
        "rice", "pasta", "cereal", "oatmeal", "flour", "sugar", "oil", "sauce",
        "soup", "beans", "can", "canned", "nuts", "peanut butter",
    )),
    "beverages": ("Beverages", (
        "water", "juice", "soda", "coffee", "tea", "beer", "wine", "drink",
    )),
    "snacks": ("Snacks", (
        "chips", "crackers", "cookies", "candy", "chocolate", "popcorn",
        "pretzel", "granola",
    )),
    "household": ("Household", (
        "soap", "detergent", "paper", "towel", "tissue", "trash", "bag",
        "cleaner", "sponge",
    )),
    DEFAULT_CATEGORY: ("Other", ()),
}


def detect_category(text: str) -> str:
    """按关键字子串匹配分类，按 CATEGORIES 声明顺序取第一个命中"""
    lower = text.lower()
    for category, (_, keywords) in CATEGORIES.items():
        if any(keyword in lower for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def _item_factory(event: Event) -> Entity:
    return Entity(
        id=event.id,
        attributes={
            "text": event.payload.get("text", ""),
            "category": event.payload.get("category") or DEFAULT_CATEGORY,
        },
        status={"checked": False},
    )


def _prepare(payload: dict[str, Any]) -> dict[str, Any]:
    if not payload.get("category"):
        payload = {**payload, "category": detect_category(str(payload.get("text", "")))}
    return payload


SHOPPING = ListDomain(
    kind=ListKind.SHOPPING,
    entity_factory=_item_factory,
    toggle_ops=(EventOp.CHECKED, EventOp.UNCHECKED),
    attribute_ops={},
    prepare=_prepare,
)


class Suggestion(BaseModel):
    """补全建议项"""

    text: str
    count: int


def item_frequencies(events: Iterable[Event]) -> dict[str, Suggestion]:
    """统计历史勾选频次：每次 checked 计 1 分，仅统计至少被勾选一次的条目

    Returns:
        小写文本 -> Suggestion
    """
    events = list(events)
    texts: dict[Any, str] = {}
    for event in events:
        text = str(event.payload.get("text") or "").strip()
        if event.op == EventOp.ADDED and text:
            texts[event.id] = text

    frequencies: dict[str, Suggestion] = {}
    for event in events:
        if event.op != EventOp.CHECKED or event.id not in texts:
            continue
        text = texts[event.id]
        key = text.lower()
        current = frequencies.get(key)
        frequencies[key] = Suggestion(
            text=current.text if current else text,
            count=(current.count if current else 0) + 1,
        )
    return frequencies


def suggestions(
    events: Iterable[Event],
    current_items: Iterable[Entity],
    limit: int | None = None,
) -> list[Suggestion]:
    """按频次倒序给出补全建议，排除当前清单中已有的条目"""
    on_list = {item.text.lower() for item in current_items}
    ranked = sorted(
        (s for key, s in item_frequencies(events).items() if key not in on_list),
        key=lambda s: s.count,
        reverse=True,
    )
    return ranked[:limit] if limit is not None else ranked

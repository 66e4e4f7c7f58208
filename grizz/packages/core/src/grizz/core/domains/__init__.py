"""清单类型规则注册表"""

from ..models.enums import ListKind
from .base import GENERIC, ListDomain
from .planner import PLANNER
from .shopping import SHOPPING

DOMAINS: dict[ListKind, ListDomain] = {
    ListKind.SHOPPING: SHOPPING,
    ListKind.PLANNER: PLANNER,
}


def get_domain(kind: ListKind | str | None) -> ListDomain:
    """按清单类型获取规则，未知类型返回通用规则"""
    if kind is None:
        return GENERIC
    try:
        return DOMAINS[ListKind(kind)]
    except ValueError:
        return GENERIC


__all__ = [
    "DOMAINS",
    "GENERIC",
    "PLANNER",
    "SHOPPING",
    "ListDomain",
    "get_domain",
]

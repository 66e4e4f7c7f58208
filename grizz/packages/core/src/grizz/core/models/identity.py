"""ListIdentity -- 清单身份 (owner, kind, list_key)

list_key 默认为本地日期 YYYY-MM-DD（每日一份清单）。
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from .enums import ListKind


def today_key(today: date | None = None) -> str:
    """获取当天的日期键 YYYY-MM-DD（本地时间）"""
    return (today or date.today()).isoformat()


class ListIdentity(BaseModel):
    """一份清单实例的身份"""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(description="清单所有者")
    kind: ListKind = Field(description="清单类型")
    list_key: str = Field(description="清单键（默认日期键）")

    @classmethod
    def for_today(
        cls,
        owner: str,
        kind: ListKind | str,
        today: date | None = None,
    ) -> "ListIdentity":
        return cls(owner=owner, kind=ListKind(kind), list_key=today_key(today))

    @property
    def path(self) -> str:
        """远端存储路径：{owner}/{kind}/{list_key}"""
        return f"{self.owner}/{self.kind.value}/{self.list_key}"

    @property
    def slot(self) -> str:
        """本地降级快照槽位（每个清单类型一个）"""
        return f"changelog:{self.kind.value}"

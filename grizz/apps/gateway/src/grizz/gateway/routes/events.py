"""清单事件路由

GET  /api/lists/{owner}/{kind}/{list_key}: 完整事件集合（扁平 JSON 数组）
POST /api/lists/{owner}/{kind}/{list_key}: 以 query 参数追加一个事件
- 201: 追加成功，返回存储端分配的 timeStamp
- 400: 记录缺少 op 或无法解析
- 404: 未知清单类型
"""

from fastapi import APIRouter, Depends, Request
from grizz.core.models import ListIdentity, ListKind, WireFormatError
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_store_group
from ..services.list_service import ListEventService

router = APIRouter()


class AppendResponse(BaseModel):
    """追加成功响应"""

    ok: bool = True
    time_stamp: str = Field(serialization_alias="timeStamp")


def _resolve_identity(owner: str, kind: str, list_key: str) -> ListIdentity | JSONResponse:
    try:
        return ListIdentity(owner=owner, kind=ListKind(kind), list_key=list_key)
    except ValueError:
        return JSONResponse(
            status_code=404,
            content={
                "error": {
                    "code": "UNKNOWN_LIST_KIND",
                    "message": f"List kind {kind!r} does not exist",
                }
            },
        )


@router.get("/api/lists/{owner}/{kind}/{list_key}")
async def get_events(
    owner: str,
    kind: str,
    list_key: str,
    store_group=Depends(get_store_group),
):
    """查询清单的完整事件集合，按写入顺序"""
    identity = _resolve_identity(owner, kind, list_key)
    if isinstance(identity, JSONResponse):
        return identity

    service = ListEventService(store_group)
    return await service.list_records(identity)


@router.post("/api/lists/{owner}/{kind}/{list_key}")
async def append_event(
    owner: str,
    kind: str,
    list_key: str,
    request: Request,
    store_group=Depends(get_store_group),
):
    """追加事件：query 参数即扁平事件字段，时间戳由存储端分配"""
    identity = _resolve_identity(owner, kind, list_key)
    if isinstance(identity, JSONResponse):
        return identity

    service = ListEventService(store_group)
    try:
        stored = await service.append_record(identity, dict(request.query_params))
    except WireFormatError as e:
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": "MALFORMED_EVENT",
                    "message": str(e),
                }
            },
        )

    return JSONResponse(
        status_code=201,
        content=AppendResponse(time_stamp=stored.ts).model_dump(by_alias=True),
    )

"""ListContextMiddleware -- 为清单事件请求绑定 list_path

从 /api/lists/{owner}/{kind}/{list_key} 中提取清单路径，
贯穿该请求内的所有日志。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

LISTS_PREFIX = "/api/lists/"


class ListContextMiddleware(BaseHTTPMiddleware):
    """清单级上下文中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path.startswith(LISTS_PREFIX):
            parts = path[len(LISTS_PREFIX):].strip("/").split("/")
            # 仅完整的 owner/kind/list_key 才绑定
            if len(parts) == 3 and all(parts):
                structlog.contextvars.bind_contextvars(list_path="/".join(parts))

        return await call_next(request)

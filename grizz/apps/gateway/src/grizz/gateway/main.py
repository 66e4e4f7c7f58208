"""FastAPI 应用主文件 -- 清单事件存储服务

app 创建 + lifespan 管理：DB 初始化/关闭 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from grizz.core.config import get_db_path
from grizz.core.store import create_store_group

from .middleware.list_context_mw import ListContextMiddleware
from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .routes import events, health

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB，关闭时清理连接"""
    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    app.state.store_group = store_group
    log.info("event_store_ready", db_path=db_path)

    yield

    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Grizz Lists Event Store",
        version="0.1.0",
        description="Grizz Lists 清单事件日志存储 API",
        lifespan=lifespan,
    )

    # 注册中间件（后注册的先执行：Logging 先清空并绑定 request_id）
    app.add_middleware(ListContextMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()

    app.include_router(events.router, tags=["events"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()

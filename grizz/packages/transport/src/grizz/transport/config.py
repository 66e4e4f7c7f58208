"""TransportConfig -- 事件存储连接配置加载

从环境变量加载配置，不硬编码存储地址。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()


class TransportConfig(BaseModel):
    """Transport 包配置 -- 从环境变量加载

    环境变量:
        GRIZZ_STORE_URL: 事件存储基础 URL（默认 http://localhost:8000/api/lists）
        GRIZZ_STORE_MODE: 存储模式（http/memory）
        GRIZZ_STORE_TIMEOUT_S: 请求超时（秒，默认 10）
    """

    base_url: str = Field(
        default="http://localhost:8000/api/lists",
        description="事件存储基础 URL，清单路径拼接在其后",
    )
    mode: Literal["http", "memory"] = Field(
        default="http",
        description="存储模式：http / memory（进程内，用于离线开发与测试）",
    )
    timeout_s: float = Field(
        default=10.0,
        gt=0,
        description="单次请求超时（秒）",
    )


def load_transport_config() -> TransportConfig:
    """从环境变量加载 Transport 配置

    环境变量映射:
        GRIZZ_STORE_URL -> base_url
        GRIZZ_STORE_MODE -> mode (默认 "http")
        GRIZZ_STORE_TIMEOUT_S -> timeout_s (默认 10)

    Returns:
        TransportConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("GRIZZ_STORE_URL"):
        kwargs["base_url"] = val

    if val := os.environ.get("GRIZZ_STORE_MODE"):
        if val in ("http", "memory"):
            kwargs["mode"] = val
        else:
            log.warning(
                "invalid_store_mode_config",
                env_var="GRIZZ_STORE_MODE",
                value=val,
                fallback="http",
            )

    if val := os.environ.get("GRIZZ_STORE_TIMEOUT_S"):
        try:
            timeout_s = float(val)
            if timeout_s <= 0:
                raise ValueError(val)
            kwargs["timeout_s"] = timeout_s
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="GRIZZ_STORE_TIMEOUT_S",
                value=val,
                fallback=10.0,
            )
            # 使用默认值，不阻塞启动

    return TransportConfig(**kwargs)

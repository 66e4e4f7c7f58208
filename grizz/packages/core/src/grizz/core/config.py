"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、轮询周期、关闭时刷写超时、默认所有者等可配置常量。
"""

import os
from pathlib import Path

import structlog

log = structlog.get_logger()


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("GRIZZ_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取存储端事件日志 SQLite 数据库路径"""
    return os.environ.get(
        "GRIZZ_DB_PATH",
        str(_get_base_dir() / "sqlite" / "grizz.db"),
    )


def get_snapshot_db_path() -> str:
    """获取客户端本地降级快照 SQLite 数据库路径"""
    return os.environ.get(
        "GRIZZ_SNAPSHOT_DB_PATH",
        str(_get_base_dir() / "sqlite" / "snapshots.db"),
    )


def _float_env(name: str, default: float) -> float:
    """读取正数浮点环境变量，非法值记录告警后回退默认值"""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = -1.0
    if value <= 0:
        log.warning("invalid_float_config", env_var=name, value=raw, fallback=default)
        return default
    return value


def get_poll_interval_s() -> float:
    """对账轮询周期（秒）"""
    return _float_env("GRIZZ_POLL_INTERVAL_S", 5.0)


def get_flush_timeout_s() -> float:
    """关闭时刷写待确认事件的最长等待（秒）"""
    return _float_env("GRIZZ_FLUSH_TIMEOUT_S", 2.0)


def get_owner() -> str:
    """默认清单所有者"""
    return os.environ.get("GRIZZ_OWNER", "test@testing.com")


# 事件日志摘要中单个字段的最大展示长度
LOG_DETAIL_MAX_CHARS: int = 100

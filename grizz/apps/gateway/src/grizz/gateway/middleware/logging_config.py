"""structlog 配置模块

dev 模式：ConsoleRenderer 可读输出
json 模式：每行一个 JSON 对象，异常展开为结构化 traceback

环境变量:
    GRIZZ_LOG_FORMAT: dev / json（默认 dev）
    GRIZZ_LOG_LEVEL: 标准库日志级别名（默认 INFO）
"""

import logging
import os

import structlog

LOG_FORMATS = ("dev", "json")

# 对账轮询会让这些库在 INFO/DEBUG 级别逐条刷屏
_CHATTY_LOGGERS: dict[str, int] = {
    "aiosqlite": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog + 标准库 logging

    Args:
        log_format: 渲染模式，None 时读取 GRIZZ_LOG_FORMAT
        log_level: 日志级别，None 时读取 GRIZZ_LOG_LEVEL
    """
    log_format = (log_format or os.environ.get("GRIZZ_LOG_FORMAT", "dev")).lower()
    log_level = (log_level or os.environ.get("GRIZZ_LOG_LEVEL", "INFO")).upper()
    unknown_format = log_format not in LOG_FORMATS
    if unknown_format:
        log_format = "dev"

    shared = _shared_processors()
    if log_format == "json":
        render_chain: list[structlog.types.Processor] = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        render_chain = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *render_chain,
            ],
            foreign_pre_chain=shared,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    for name, floor in _CHATTY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(root_logger.level, floor))

    if unknown_format:
        structlog.get_logger().warning(
            "invalid_log_format_config",
            env_var="GRIZZ_LOG_FORMAT",
            fallback="dev",
        )

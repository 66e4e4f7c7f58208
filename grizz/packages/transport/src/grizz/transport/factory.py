"""事件存储工厂 -- 按配置创建 RemoteEventStore 实现"""

import structlog

from .client import HttpEventStore
from .config import TransportConfig, load_transport_config
from .memory import MemoryEventStore

log = structlog.get_logger()


def create_event_store(
    config: TransportConfig | None = None,
) -> HttpEventStore | MemoryEventStore:
    """创建事件存储

    Args:
        config: Transport 配置，None 时从环境变量加载

    Returns:
        http 模式返回 HttpEventStore，memory 模式返回 MemoryEventStore
    """
    config = config or load_transport_config()
    if config.mode == "memory":
        log.info("event_store_created", mode="memory")
        return MemoryEventStore()
    log.info("event_store_created", mode="http", base_url=config.base_url)
    return HttpEventStore(base_url=config.base_url, timeout_s=config.timeout_s)

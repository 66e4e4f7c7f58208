"""Grizz Transport -- 事件存储访问层

packages/transport 的公开接口导出。
"""

# 核心组件
from .client import HttpEventStore

# 配置
from .config import TransportConfig, load_transport_config

# 异常
from .exceptions import MalformedPayloadError, StoreError, StoreUnreachableError
from .factory import create_event_store
from .memory import MemoryEventStore

__all__ = [
    "HttpEventStore",
    "MemoryEventStore",
    "create_event_store",
    "TransportConfig",
    "load_transport_config",
    "StoreError",
    "StoreUnreachableError",
    "MalformedPayloadError",
]

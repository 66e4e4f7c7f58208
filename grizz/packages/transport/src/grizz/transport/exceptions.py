"""Transport 异常体系

EventStoreClient 捕获全部传输异常并降级为状态指示，不向写入方传播。
"""


class StoreError(Exception):
    """Transport 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过下一次对账重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class StoreUnreachableError(StoreError):
    """事件存储不可达（连接失败、超时、5xx 等）

    此异常使引擎进入 error / offline 状态，pending 事件等待重试。
    """

    def __init__(self, url: str, original_error: Exception) -> None:
        """
        Args:
            url: 尝试访问的存储地址
            original_error: 原始异常
        """
        super().__init__(
            f"事件存储不可达: {url} -- {original_error}",
            recoverable=True,
        )
        self.url = url
        self.original_error = original_error


class MalformedPayloadError(StoreError):
    """存储返回的事件集合无法解析

    整批丢弃，不做部分信任。
    """

    def __init__(self, message: str = "事件集合格式错误") -> None:
        super().__init__(message, recoverable=True)

"""HttpEventStore -- HTTP 事件存储客户端

GET  {base_url}/{owner}/{kind}/{list_key}  -> 扁平事件 JSON 数组
POST {base_url}/{owner}/{kind}/{list_key}  -> 以 query 参数追加一个事件
"""

import httpx
import structlog

from grizz.core.models.event import Event
from grizz.core.models.identity import ListIdentity
from grizz.core.models.wire import WireFormatError, from_wire, to_wire

from .exceptions import MalformedPayloadError, StoreError, StoreUnreachableError

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5

# 连接类异常类型集合（触发 StoreUnreachableError）
_CONNECTION_ERROR_TYPES = (
    ConnectionError,
    OSError,
    TimeoutError,
    httpx.TransportError,
)


def _is_connection_error(e: Exception) -> bool:
    """判断异常是否为连接类错误（存储不可达）"""
    return isinstance(e, _CONNECTION_ERROR_TYPES)


class HttpEventStore:
    """RemoteEventStore 的 HTTP 实现"""

    def __init__(
        self,
        base_url: str = "http://localhost:8000/api/lists",
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化 HTTP 事件存储客户端

        Args:
            base_url: 存储基础 URL，清单路径拼接在其后
            timeout_s: 请求超时（秒）
            transport: 自定义 httpx transport（测试中注入 MockTransport / ASGITransport）
        """
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._http = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    def url_for(self, identity: ListIdentity) -> str:
        return f"{self._base_url}/{identity.path}"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """发送请求并把传输层失败映射为 Store 异常

        Raises:
            StoreUnreachableError: 连接失败、超时或 5xx
            StoreError: 其余非 2xx 响应
        """
        try:
            response = await self._http.request(method, url, **kwargs)
        except Exception as e:
            if _is_connection_error(e):
                raise StoreUnreachableError(url=url, original_error=e) from e
            raise StoreError(f"事件存储请求失败: {e}") from e

        if response.status_code >= 500:
            raise StoreUnreachableError(
                url=url,
                original_error=httpx.HTTPStatusError(
                    f"HTTP {response.status_code}",
                    request=response.request,
                    response=response,
                ),
            )
        if response.status_code >= 400:
            raise StoreError(
                f"事件存储拒绝请求: HTTP {response.status_code} {response.text[:200]}",
                recoverable=False,
            )
        return response

    async def fetch(self, identity: ListIdentity) -> list[Event]:
        """拉取完整事件集合

        Raises:
            StoreUnreachableError: 存储不可达
            MalformedPayloadError: 响应不是合法的事件数组
        """
        url = self.url_for(identity)
        response = await self._request("GET", url)

        try:
            records = response.json()
        except ValueError as e:
            raise MalformedPayloadError(f"响应不是合法 JSON: {e}") from e
        if not isinstance(records, list):
            raise MalformedPayloadError(
                f"响应必须是事件数组，实际为 {type(records).__name__}"
            )

        try:
            events = [from_wire(record) for record in records]
        except (WireFormatError, ValueError) as e:
            raise MalformedPayloadError(f"事件记录无法解析: {e}") from e

        log.debug("store_fetch_completed", list_path=identity.path, count=len(events))
        return events

    async def append(self, identity: ListIdentity, event: Event) -> None:
        """追加一个事件（不携带时间戳，由存储端分配）"""
        url = self.url_for(identity)
        await self._request("POST", url, params=to_wire(event))
        log.debug(
            "store_append_completed",
            list_path=identity.path,
            op=event.op,
            id=event.id,
        )

    async def health_check(self) -> bool:
        """检查事件存储可达性

        发送 GET {存储根}/health 请求。

        注意: 此方法不抛出异常，所有异常内部捕获并返回 False。
        """
        root = httpx.URL(self._base_url).copy_with(path="/health")
        try:
            resp = await self._http.get(root, timeout=HEALTH_CHECK_TIMEOUT_S)
            return resp.status_code == 200
        except Exception as e:
            log.warning("store_health_check_failed", url=str(root), error=str(e))
            return False

    async def aclose(self) -> None:
        await self._http.aclose()

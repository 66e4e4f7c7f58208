"""HttpEventStore 测试 -- 使用 httpx.MockTransport 模拟存储端"""

import httpx
import pytest
from grizz.core.models import Event
from grizz.transport import (
    HttpEventStore,
    MalformedPayloadError,
    StoreError,
    StoreUnreachableError,
)

BASE = "http://store.test/api/lists"


def make_store(handler) -> HttpEventStore:
    return HttpEventStore(base_url=BASE + "/", transport=httpx.MockTransport(handler))


class TestFetch:
    async def test_fetch_parses_wire_records(self, identity):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            return httpx.Response(
                200,
                json=[
                    {"op": "added", "id": "1", "text": "milk", "timeStamp": "t1"},
                    {"op": "reorder", "order": "[1]", "timeStamp": "t2"},
                ],
            )

        store = make_store(handler)
        events = await store.fetch(identity)
        await store.aclose()

        assert seen["path"].startswith("/api/lists/")
        assert seen["path"].endswith("/shopping/2026-10-17")
        assert events[0] == Event(op="added", id=1, ts="t1", payload={"text": "milk"})
        assert events[1].payload == {"order": [1]}

    async def test_invalid_json_is_malformed(self, identity):
        store = make_store(lambda request: httpx.Response(200, text="<html>oops"))
        with pytest.raises(MalformedPayloadError):
            await store.fetch(identity)

    async def test_non_array_is_malformed(self, identity):
        store = make_store(lambda request: httpx.Response(200, json={"events": []}))
        with pytest.raises(MalformedPayloadError):
            await store.fetch(identity)

    async def test_bad_record_discards_whole_batch(self, identity):
        store = make_store(
            lambda request: httpx.Response(200, json=[{"op": "added", "id": "1"}, {"id": "2"}])
        )
        with pytest.raises(MalformedPayloadError):
            await store.fetch(identity)

    async def test_server_error_is_unreachable(self, identity):
        store = make_store(lambda request: httpx.Response(503))
        with pytest.raises(StoreUnreachableError) as exc:
            await store.fetch(identity)
        assert exc.value.recoverable is True

    async def test_connection_error_is_unreachable(self, identity):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        store = make_store(handler)
        with pytest.raises(StoreUnreachableError) as exc:
            await store.fetch(identity)
        assert isinstance(exc.value.original_error, httpx.ConnectError)

    async def test_client_error_not_recoverable(self, identity):
        store = make_store(lambda request: httpx.Response(404, text="nope"))
        with pytest.raises(StoreError) as exc:
            await store.fetch(identity)
        assert not isinstance(exc.value, StoreUnreachableError)
        assert exc.value.recoverable is False


class TestAppend:
    async def test_append_sends_query_params(self, identity):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["params"] = dict(request.url.params)
            return httpx.Response(201, json={"ok": True, "timeStamp": "t9"})

        store = make_store(handler)
        await store.append(
            identity,
            Event(op="reorder", ts="local", user="u", payload={"order": [2, 1]}),
        )

        assert seen["method"] == "POST"
        assert seen["params"] == {"op": "reorder", "user": "u", "order": "[2,1]"}

    async def test_append_failure_raises(self, identity):
        store = make_store(lambda request: httpx.Response(500))
        with pytest.raises(StoreUnreachableError):
            await store.append(identity, Event(op="added", id=1))


class TestHealthCheck:
    async def test_health_ok(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/health"
            return httpx.Response(200, json={"status": "ok"})

        assert await make_store(handler).health_check() is True

    async def test_health_never_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert await make_store(handler).health_check() is False


def test_url_for(identity):
    store = HttpEventStore(base_url=BASE)
    assert store.url_for(identity) == f"{BASE}/{identity.path}"

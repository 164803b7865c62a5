"""Remote Catalog Client - verifies auth, retry and error mapping against httpx.MockTransport.

Invariants:
    - login() stores the token and every later request carries it
    - 429/5xx are retried, then surface as retryable RemoteApiError
    - Other 4xx fail immediately; 401 maps to AuthenticationError
"""

import json

import httpx
import pytest

from catalog_sync.core.errors import AuthenticationError, RemoteApiError
from catalog_sync.infrastructure.remote_api_client import RemoteCatalogClient


def _client(handler, email="admin@test.local", password="secret", max_retries=3):
    return RemoteCatalogClient(
        "http://pricing.test", email, password,
        max_retries=max_retries, base_delay_ms=0,
        transport=httpx.MockTransport(handler),
    )


def _login_ok(request):
    return httpx.Response(200, json={"token": "tok-123"})


async def test_login_stores_token_and_sends_bearer():
    seen = []

    def handler(request):
        seen.append(request)
        if request.url.path == "/api/auth/login":
            assert json.loads(request.content) == {
                "email": "admin@test.local", "password": "secret",
            }
            return _login_ok(request)
        return httpx.Response(200, json=[])

    client = _client(handler)
    assert await client.login() == "tok-123"
    assert client.authenticated
    await client.list_services()
    assert seen[-1].headers["Authorization"] == "Bearer tok-123"
    assert "Authorization" not in seen[0].headers
    await client.close()


async def test_login_without_credentials_never_calls_api():
    calls = []

    def handler(request):
        calls.append(request)
        return _login_ok(request)

    client = _client(handler, email="", password="")
    with pytest.raises(AuthenticationError):
        await client.login()
    assert calls == []


async def test_login_rejected():
    client = _client(lambda r: httpx.Response(401, json={"message": "bad credentials"}))
    with pytest.raises(AuthenticationError) as exc_info:
        await client.login()
    assert "bad credentials" in exc_info.value.message
    assert not client.authenticated


async def test_login_response_without_token():
    client = _client(lambda r: httpx.Response(200, json={"user": "admin"}))
    with pytest.raises(AuthenticationError):
        await client.login()


async def test_server_error_retried_then_succeeds():
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json=[{"id": 1, "nome": "A"}])

    client = _client(handler)
    assert await client.list_services() == [{"id": 1, "nome": "A"}]
    assert len(attempts) == 3


async def test_server_error_exhausts_retries():
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(500, json={"error": "boom"})

    client = _client(handler, max_retries=2)
    with pytest.raises(RemoteApiError) as exc_info:
        await client.list_services()
    assert exc_info.value.retryable is True
    assert exc_info.value.status_code == 500
    assert len(attempts) == 3


async def test_connection_error_is_retried():
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json=[])

    client = _client(handler)
    assert await client.list_services() == []
    assert len(attempts) == 2


async def test_client_error_not_retried():
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(404, json={"message": "no such service"})

    client = _client(handler)
    with pytest.raises(RemoteApiError) as exc_info:
        await client.delete_service(7, "A")
    assert exc_info.value.status_code == 404
    assert exc_info.value.retryable is False
    assert exc_info.value.context.record_name == "A"
    assert len(attempts) == 1


async def test_list_accepts_wrapped_payloads():
    client = _client(lambda r: httpx.Response(200, json={"data": [{"id": 1}]}))
    assert await client.list_services() == [{"id": 1}]
    client = _client(lambda r: httpx.Response(200, json={"servicos": [{"id": 2}]}))
    assert await client.list_services() == [{"id": 2}]


async def test_create_and_update_send_payload():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"id": 9, **json.loads(request.content)})

    client = _client(handler)
    body = await client.create_service({"nome": "A"}, "A")
    assert body["id"] == 9
    await client.update_service(9, {"nome": "A", "preco_base": 10.0}, "A")
    assert (requests[0].method, requests[0].url.path) == ("POST", "/api/pricing")
    assert (requests[1].method, requests[1].url.path) == ("PUT", "/api/pricing/9")


async def test_invalid_json_body():
    client = _client(lambda r: httpx.Response(200, text="<html>"))
    with pytest.raises(RemoteApiError):
        await client.list_services()

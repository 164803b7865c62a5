"""Remote Catalog Client - httpx wrapper for the production pricing API with retry and error mapping.

Invariants:
    - Timeouts, connection errors, 429 and 5xx: retried up to max_retries with
      exponential backoff, then raised as RemoteApiError(retryable=True)
    - Other 4xx: immediate failure, no retry
    - 401/403 (and a login response without a token) raise AuthenticationError
    - Every request after login() carries the bearer token

Design Decisions:
    - One AsyncClient per sync run: connection reuse across the per-record calls
    - transport injectable so tests run against httpx.MockTransport, no sockets
"""

import asyncio
import logging
from typing import Any

import httpx

from catalog_sync.core.errors import (
    AuthenticationError, ErrorContext, RemoteApiError,
)

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"
PRICING_PATH = "/api/pricing"


class RemoteCatalogClient:
    """Wraps httpx.AsyncClient with bearer auth, retry, and error mapping."""

    def __init__(
        self,
        base_url: str,
        email: str,
        password: str,
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        base_delay_ms: int = 500,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout_seconds, transport=transport,
        )
        self.email = email
        self.password = password
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self._token: str | None = None

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    async def login(self) -> str:
        """Acquire the bearer token used by every later call."""
        context = ErrorContext(operation="login", target="remote_api")
        if not self.email or not self.password:
            raise AuthenticationError("remote API credentials not configured", context)
        response = await self._request(
            "POST", LOGIN_PATH,
            json={"email": self.email, "password": self.password},
            context=context,
        )
        body = _json_body(response) if response.content else {}
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise AuthenticationError("login response carried no token", context)
        self._token = token
        logger.info("Authenticated against remote pricing API", extra={"target": "remote_api"})
        return token

    async def list_services(self) -> list[dict]:
        response = await self._request(
            "GET", PRICING_PATH, context=ErrorContext(operation="list", target="remote_api"),
        )
        body = _json_body(response)
        # Some deployments wrap the list: {"data": [...]} / {"servicos": [...]}
        if isinstance(body, dict):
            body = body.get("data") or body.get("servicos") or []
        if not isinstance(body, list):
            raise RemoteApiError("unexpected list payload", response.status_code)
        return body

    async def create_service(self, payload: dict, record_name: str | None = None) -> dict:
        response = await self._request(
            "POST", PRICING_PATH, json=payload,
            context=ErrorContext(
                operation="create", target="remote_api", record_name=record_name,
            ),
        )
        return _json_body(response)

    async def update_service(
        self, service_id: Any, payload: dict, record_name: str | None = None,
    ) -> dict:
        response = await self._request(
            "PUT", f"{PRICING_PATH}/{service_id}", json=payload,
            context=ErrorContext(
                operation="update", target="remote_api", record_name=record_name,
            ),
        )
        return _json_body(response)

    async def delete_service(self, service_id: Any, record_name: str | None = None) -> None:
        await self._request(
            "DELETE", f"{PRICING_PATH}/{service_id}",
            context=ErrorContext(
                operation="delete", target="remote_api", record_name=record_name,
            ),
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        context: ErrorContext | None = None,
    ) -> httpx.Response:
        """Send one request, retrying transient failures."""
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(
                    method, path, json=json, headers=headers,
                )
            except httpx.TimeoutException as e:
                error = RemoteApiError(
                    f"timeout on {method} {path}: {e}", retryable=True, context=context,
                )
            except httpx.TransportError as e:
                error = RemoteApiError(
                    f"connection error on {method} {path}: {e}",
                    retryable=True, context=context,
                )
            else:
                if response.is_success:
                    return response
                error = _status_error(response, context)

            if not getattr(error, "retryable", False) or attempt >= self.max_retries:
                raise error
            delay_ms = self.base_delay_ms * (2 ** attempt)
            logger.warning(
                f"Remote API {method} {path} failed, retry in {delay_ms}ms: {error.message}",
                extra={"target": "remote_api", "attempt": attempt + 1},
            )
            await asyncio.sleep(delay_ms / 1000)
        raise RemoteApiError(f"{method} {path} exhausted retries", context=context)


def _status_error(
    response: httpx.Response, context: ErrorContext | None,
) -> AuthenticationError | RemoteApiError:
    message = _error_message(response)
    if response.status_code in (401, 403):
        return AuthenticationError(f"{response.status_code} {message}", context)
    retryable = response.status_code == 429 or response.status_code >= 500
    return RemoteApiError(
        message, status_code=response.status_code, retryable=retryable, context=context,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise RemoteApiError(
            f"invalid JSON response: {e}", status_code=response.status_code,
        ) from e

import asyncio
import threading
import time
import weakref
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from braintree_pay.domain.credentials import ConnectionParameters
from braintree_pay.infrastructure.auth import authorization_header
from braintree_pay.infrastructure.gateway_schema import (
    API_VERSION,
    JSON_CONTENT_TYPE,
    encode_body,
    extract_error_message,
)
from braintree_pay.infrastructure.metrics import GATEWAY_REQUEST_DURATION


logger = structlog.get_logger()


@dataclass(frozen=True)
class GatewaySuccess:
    status_code: int
    content: bytes


@dataclass(frozen=True)
class GatewayFailure:
    """A call that did not succeed.

    `status_code` is None when no HTTP response was received at all;
    `error_message` is set only when the body carried `apiErrorResponse.message`.
    """

    cause: Exception
    status_code: int | None = None
    error_message: str | None = None


type GatewayResult = GatewaySuccess | GatewayFailure


class GatewayClient:
    """Executes Braintree API calls over httpx.

    An `httpx.AsyncClient` pool belongs to the event loop that first used it,
    so one client is created per running loop through `client_factory`.
    Timeouts, TLS and pooling are the factory's concern. HTTP, transport and
    request-building errors are returned as `GatewayFailure`, never raised.
    """

    def __init__(self, client_factory: Callable[[], httpx.AsyncClient]) -> None:
        self._client_factory = client_factory
        self._clients: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, httpx.AsyncClient] = (
            weakref.WeakKeyDictionary()
        )
        self._lock = threading.Lock()

    def _client(self) -> httpx.AsyncClient:
        loop = asyncio.get_running_loop()
        with self._lock:
            client = self._clients.get(loop)
            if client is None or client.is_closed:
                client = self._client_factory()
                self._clients[loop] = client
            return client

    async def send(
        self,
        params: ConnectionParameters,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        *,
        operation: str,
    ) -> GatewayResult:
        start = time.perf_counter()
        outcome = "error"
        try:
            url = httpx.URL(params.api_uri).join(path)
            headers = {
                "Authorization": authorization_header(params.credentials),
                "X-ApiVersion": API_VERSION,
                "Accept": JSON_CONTENT_TYPE,
            }
            content: bytes | None = None
            if body is not None:
                headers["Content-Type"] = JSON_CONTENT_TYPE
                content = encode_body(body)

            response = await self._client().request(method, url, headers=headers, content=content)
            response.raise_for_status()
            outcome = "success"
        except httpx.HTTPStatusError as e:
            outcome = "rejected"
            status_code = e.response.status_code
            logger.warning("gateway_request_rejected", operation=operation, method=method, status_code=status_code)
            return GatewayFailure(
                cause=e,
                status_code=status_code,
                error_message=extract_error_message(e.response.content),
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # ValueError covers header values that cannot be encoded
            logger.warning(
                "gateway_request_failed",
                operation=operation,
                method=method,
                error_type=type(e).__name__,
                error=str(e),
            )
            return GatewayFailure(cause=e)
        finally:
            GATEWAY_REQUEST_DURATION.labels(operation=operation, outcome=outcome).observe(time.perf_counter() - start)

        return GatewaySuccess(status_code=response.status_code, content=response.content)

    async def aclose(self) -> None:
        """Close the client of the calling loop.

        Clients of loops that have already closed are dropped; clients of
        loops still running elsewhere are left for those loops to close.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            current = self._clients.pop(loop, None)
            for other in [other for other in self._clients if other.is_closed()]:
                del self._clients[other]
        if current is not None:
            await current.aclose()
        logger.info("gateway_client_closed")

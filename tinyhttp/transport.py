import logging
import time
import weakref
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Protocol

import httpx

from .configs import HttpConfig, http_config
from .exceptions import TransportError, TransportErrorStatus
from .models import Request, Response

logger = logging.getLogger(__name__)

# httpcore's wording when a kept-alive connection closes before any response bytes arrive.
_DISCONNECTED = "Server disconnected"


class Transport(Protocol):
    async def send(self, request: Request) -> Response: ...

    async def aclose(self) -> None: ...


def _error_status(exc: Exception) -> TransportErrorStatus:
    if isinstance(exc, httpx.RemoteProtocolError) and str(exc).startswith(_DISCONNECTED):
        return TransportErrorStatus.REQUEST_CANCELED
    if isinstance(exc, httpx.TimeoutException):
        return TransportErrorStatus.TIMEOUT
    if isinstance(exc, httpx.ConnectError):
        return TransportErrorStatus.CONNECT_FAILURE
    if isinstance(exc, (httpx.ProtocolError, httpx.HTTPStatusError)):
        return TransportErrorStatus.PROTOCOL_ERROR
    return TransportErrorStatus.UNKNOWN_ERROR


class HttpxTransport:
    """
    Transport backed by httpx.

    Connections are pooled in one shared ``httpx.AsyncBaseTransport``. Every
    cookie store gets its own ``httpx.AsyncClient`` working directly on the
    store's jar, so ``Set-Cookie`` additions and expiries land in the store
    and cookies never leak between stores. Requests without a store share a
    single client whose jar accepts nothing.
    """

    def __init__(
        self,
        pool: httpx.AsyncBaseTransport | None = None,
        config: HttpConfig | None = None,
    ):
        self._config = config or http_config
        self._pool = pool
        self._owns_pool = pool is None
        self._clients: dict[int, httpx.AsyncClient] = {}
        self._stateless_client: httpx.AsyncClient | None = None

    def _ensure_pool(self) -> httpx.AsyncBaseTransport:
        if self._pool is None:
            self._pool = httpx.AsyncHTTPTransport()
        return self._pool

    async def aclose(self) -> None:
        # Clients are dropped, not closed: closing one closes the shared pool.
        self._clients.clear()
        self._stateless_client = None
        if self._pool is not None and self._owns_pool:
            await self._pool.aclose()
            self._pool = None

    async def __aenter__(self) -> "HttpxTransport":
        self._ensure_pool()
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.aclose()

    def _build_client(self, jar: CookieJar) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._ensure_pool(),
            cookies=jar,
            follow_redirects=True,
            max_redirects=self._config.MAX_REDIRECTS,
            timeout=self._config.TIMEOUT,
            trust_env=False,
        )

    def _client_for(self, request: Request) -> httpx.AsyncClient:
        cookies = request.cookies
        if cookies is None:
            if self._stateless_client is None:
                self._stateless_client = self._build_client(CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])))
            return self._stateless_client

        # httpx.Cookies is unhashable; key on identity and forget the client with the store.
        key = id(cookies)
        client = self._clients.get(key)
        if client is None:
            client = self._build_client(cookies.jar)
            self._clients[key] = client
            weakref.finalize(cookies, self._clients.pop, key, None)
        return client

    async def send(self, request: Request) -> Response:
        client = self._client_for(request)
        start_time = time.time()
        try:
            http_request = client.build_request(
                method=request.method,
                url=request.url,
                headers=request.build_headers(),
                content=request.content,
            )
            http_response = await client.send(http_request, stream=True)
            try:
                body = b"".join([chunk async for chunk in http_response.aiter_raw()])
            finally:
                await http_response.aclose()
            # unfollowed 3xx finals (304, a 300 without Location) are delivered as responses
            if self._config.RAISE_FOR_STATUS and http_response.status_code >= 400:
                http_response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(
                f"{request.method} {request.url} failed: {e}", _error_status(e)
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"<- {http_response.status_code} {http_response.url} ({latency_ms}ms)")

        return Response(
            status_code=http_response.status_code,
            url=str(http_response.url),
            headers=httpx.Headers(http_response.headers),
            body=body,
            request=request,
            elapsed_ms=latency_ms,
        )

import inspect
import logging
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote

from .configs import HttpConfig, http_config
from .exceptions import MiddlewareError, TransportError
from .headers import set_header
from .log import trace_id_generator, trace_id_var
from .middleware import proceed
from .models import Request, Response
from .transport import HttpxTransport, Transport
from .types import Middleware, NextFn, ResponseCallback

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"

FormValues = Mapping[str, str] | Iterable[tuple[str, str]]


def encode_form(values: FormValues) -> str:
    """Serialize form values as ``application/x-www-form-urlencoded``, keeping their order."""
    pairs = values.items() if isinstance(values, Mapping) else values
    return "&".join(f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in pairs)


async def invoke_callback(callback: ResponseCallback, response: Response | None) -> None:
    result = callback(response)
    if inspect.isawaitable(result):
        await result


class Http:
    """
    Stateless request pipeline.

    Every verb builds a fresh request, hands it to the middleware together
    with a continuation, and only sends it once the continuation is awaited.
    The outcome is reported through ``callback``: the response, or ``None``
    when the transport failed. A middleware that never continues drops the
    request and the callback never fires.
    """

    def __init__(self, transport: Transport | None = None, config: HttpConfig | None = None):
        self._config = config or http_config
        self._transport = transport or HttpxTransport(config=self._config)

    @property
    def config(self) -> HttpConfig:
        return self._config

    async def close(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> "Http":
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.close()

    def _create_request(self, address: str) -> Request:
        request = Request(url=address)
        set_header(request, "Accept-Encoding", self._config.ACCEPT_ENCODING)
        set_header(request, "User-Agent", self._config.USER_AGENT)
        return request

    async def _attempt(self, request: Request, callback: ResponseCallback, middleware: Middleware) -> bool:
        """Run one pass through the middleware; return True when the transport cancelled it."""
        invoked = False
        cancelled = False

        async def next_fn() -> None:
            nonlocal invoked, cancelled
            if invoked:
                raise MiddlewareError(f"Continuation for {request.method} {request.url} invoked twice")
            invoked = True
            logger.debug(f"-> {request.method} {request.url}")
            try:
                response = await self._transport.send(request)
            except TransportError as e:
                if e.cancelled:
                    cancelled = True
                    return
                logger.warning(f"{request.method} {request.url} failed ({e.status}): {e}")
                response = None
            await invoke_callback(callback, response)

        await middleware(request, next_fn)
        if not invoked:
            logger.debug(f"{request.method} {request.url} dropped by middleware")
        return cancelled

    async def get(self, address: str, callback: ResponseCallback, middleware: Middleware | None = None) -> None:
        middleware = middleware or proceed
        token = trace_id_var.set(trace_id_generator())
        try:
            retries = 0
            while await self._attempt(self._create_request(address), callback, middleware):
                retries += 1
                limit = self._config.MAX_CANCEL_RETRIES
                if limit is not None and retries > limit:
                    logger.warning(f"{address} cancelled {retries} times, giving up")
                    await invoke_callback(callback, None)
                    return
                logger.debug(f"{address} cancelled by transport, retrying ({retries})")
        finally:
            trace_id_var.reset(token)

    async def delete(self, address: str, callback: ResponseCallback, middleware: Middleware | None = None) -> None:
        middleware = middleware or proceed

        async def delete_middleware(request: Request, next_fn: NextFn) -> None:
            request.method = "DELETE"
            await middleware(request, next_fn)

        await self.get(address, callback, delete_middleware)

    async def post(
        self,
        address: str,
        values: FormValues,
        callback: ResponseCallback,
        middleware: Middleware | None = None,
    ) -> None:
        middleware = middleware or proceed
        # Materialized once so a retried request resends the same body.
        data = encode_form(values).encode("utf-8")

        async def post_middleware(request: Request, next_fn: NextFn) -> None:
            request.method = "POST"
            set_header(request, "Content-Type", FORM_CONTENT_TYPE)

            async def write_body() -> None:
                async with request.open_body() as stream:
                    stream.write(data)
                await next_fn()

            await middleware(request, write_body)

        await self.get(address, callback, post_middleware)

    async def put(
        self,
        address: str,
        values: FormValues,
        callback: ResponseCallback,
        middleware: Middleware | None = None,
    ) -> None:
        middleware = middleware or proceed

        async def put_middleware(request: Request, next_fn: NextFn) -> None:
            request.method = "PUT"
            await middleware(request, next_fn)

        await self.post(address, values, callback, put_middleware)

import logging
from typing import Any

import httpx

from .client import FormValues, Http, invoke_callback
from .headers import set_header
from .middleware import proceed
from .models import Request, Response
from .types import Middleware, NextFn, ResponseCallback

logger = logging.getLogger(__name__)


class HttpSession:
    """
    HTTP session with cookie and referrer support.

    Requests issued through a session share one cookie store and carry the
    current ``referer``. A successful ``text/html`` response moves the
    referrer to the address it was finally served from.

    No locking is done: concurrent requests on one session may interleave
    their cookie and referrer updates.

    Closing the session closes its ``Http`` only when the session created it.
    """

    def __init__(self, referer: str | None = None, http: Http | None = None):
        self._cookies = httpx.Cookies()
        self._http = http or Http()
        self._owns_http = http is None
        self.referer = referer

    @property
    def cookies(self) -> httpx.Cookies:
        return self._cookies

    async def close(self) -> None:
        if self._owns_http:
            await self._http.close()

    async def __aenter__(self) -> "HttpSession":
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.close()

    def _attach_middleware(self, middleware: Middleware | None) -> Middleware:
        middleware = middleware or proceed

        async def attached(request: Request, next_fn: NextFn) -> None:
            if request.supports_cookies:
                request.cookies = self._cookies
            set_header(request, "Referer", self.referer)
            await middleware(request, next_fn)

        return attached

    def _attach_callback(self, callback: ResponseCallback) -> ResponseCallback:
        async def attached(response: Response | None) -> None:
            content_type = response.content_type if response is not None else None
            if content_type is not None and content_type.startswith("text/html"):
                logger.debug(f"Referer -> {response.url}")
                self.referer = str(response.url)
            await invoke_callback(callback, response)

        return attached

    async def get(self, address: str, callback: ResponseCallback, middleware: Middleware | None = None) -> None:
        await self._http.get(address, self._attach_callback(callback), self._attach_middleware(middleware))

    async def delete(self, address: str, callback: ResponseCallback, middleware: Middleware | None = None) -> None:
        await self._http.delete(address, self._attach_callback(callback), self._attach_middleware(middleware))

    async def post(
        self,
        address: str,
        values: FormValues,
        callback: ResponseCallback,
        middleware: Middleware | None = None,
    ) -> None:
        await self._http.post(address, values, self._attach_callback(callback), self._attach_middleware(middleware))

    async def put(
        self,
        address: str,
        values: FormValues,
        callback: ResponseCallback,
        middleware: Middleware | None = None,
    ) -> None:
        await self._http.put(address, values, self._attach_callback(callback), self._attach_middleware(middleware))

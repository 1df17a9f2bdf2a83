import io
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, ClassVar

import httpx

from .exceptions import ResponseClosedError
from .headers import STRUCTURED_FIELDS, structured_field


@dataclass
class Request:
    url: str
    method: str = "GET"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes | None = None
    cookies: httpx.Cookies | None = None

    accept: str | None = None
    connection: str | None = None
    content_type: str | None = None
    expect: str | None = None
    host: str | None = None
    referer: str | None = None
    user_agent: str | None = None

    supports_cookies: ClassVar[bool] = True

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers)

    def get_header(self, name: str) -> str | None:
        attr = structured_field(name)
        if attr is not None:
            return getattr(self, attr)
        return self.headers.get(name)

    def build_headers(self) -> httpx.Headers:
        headers = httpx.Headers(self.headers)
        for attr in STRUCTURED_FIELDS.values():
            value = getattr(self, attr)
            if value is not None:
                headers[attr.replace("_", "-")] = value
        return headers

    @asynccontextmanager
    async def open_body(self) -> AsyncIterator[io.BytesIO]:
        """Yield a writable stream; whatever is written becomes the request content."""
        stream = io.BytesIO()
        try:
            yield stream
            self.content = stream.getvalue()
        finally:
            stream.close()


@dataclass
class Response:
    status_code: int
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""
    request: Request | None = None
    elapsed_ms: int = 0
    _closed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def content_length(self) -> int:
        value = self.headers.get("content-length")
        if value is None:
            return -1
        try:
            return int(value)
        except ValueError:
            return -1

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_encoding(self) -> str | None:
        return self.headers.get("content-encoding")

    @property
    def closed(self) -> bool:
        return self._closed

    def open_stream(self) -> io.BytesIO:
        """Readable stream over the body exactly as it came off the wire."""
        if self._closed:
            raise ResponseClosedError(f"Response body for {self.url} has been released")
        return io.BytesIO(self.body)

    def close(self) -> None:
        self.body = b""
        self._closed = True

    def __enter__(self) -> "Response":
        return self

    def __exit__(self, *_args: Any) -> None:
        self.close()

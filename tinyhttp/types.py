from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Request, Response

NextFn = Callable[[], Awaitable[None]]
Middleware = Callable[["Request", NextFn], Awaitable[None]]

ResponseCallback = Callable[["Response | None"], Awaitable[None] | None]

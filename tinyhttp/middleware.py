import logging

from .headers import set_header
from .models import Request
from .types import Middleware, NextFn


async def proceed(request: Request, next_fn: NextFn) -> None:
    await next_fn()


def compose(*middlewares: Middleware) -> Middleware:
    """Nest middlewares into one; the first runs outermost and any of them may stop the chain."""

    async def middleware(request: Request, next_fn: NextFn) -> None:
        async def run(index: int) -> None:
            if index >= len(middlewares):
                await next_fn()
                return
            await middlewares[index](request, lambda: run(index + 1))

        await run(0)

    return middleware


def logging_middleware(logger: logging.Logger | None = None) -> Middleware:
    log = logger or logging.getLogger(__name__)

    async def middleware(request: Request, next_fn: NextFn) -> None:
        log.info(f"-> {request.method} {request.url}")
        await next_fn()

    return middleware


def headers_middleware(**headers: str) -> Middleware:
    async def middleware(request: Request, next_fn: NextFn) -> None:
        for name, value in headers.items():
            set_header(request, name.replace("_", "-"), value)
        await next_fn()

    return middleware

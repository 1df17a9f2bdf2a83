"""Minimal asynchronous HTTP client with a middleware pipeline and sessions."""

from .client import FORM_CONTENT_TYPE, FormValues, Http, encode_form
from .configs import HttpConfig, http_config
from .decoding import as_binary, as_string, as_uncompressed_stream, resolve_charset
from .exceptions import (
    MiddlewareError,
    ResponseClosedError,
    TinyHttpError,
    TransportError,
    TransportErrorStatus,
)
from .headers import set_header
from .log import init_logging
from .middleware import compose, headers_middleware, logging_middleware, proceed
from .models import Request, Response
from .session import HttpSession
from .transport import HttpxTransport, Transport
from .types import Middleware, NextFn, ResponseCallback

__all__ = [
    "Http",
    "HttpSession",
    "Request",
    "Response",
    "FormValues",
    "FORM_CONTENT_TYPE",
    "encode_form",
    "set_header",
    "as_uncompressed_stream",
    "as_binary",
    "as_string",
    "resolve_charset",
    "Middleware",
    "NextFn",
    "ResponseCallback",
    "proceed",
    "compose",
    "logging_middleware",
    "headers_middleware",
    "Transport",
    "HttpxTransport",
    "TinyHttpError",
    "TransportError",
    "TransportErrorStatus",
    "MiddlewareError",
    "ResponseClosedError",
    "HttpConfig",
    "http_config",
    "init_logging",
]

from enum import StrEnum


class TransportErrorStatus(StrEnum):
    REQUEST_CANCELED = "request_canceled"
    CONNECT_FAILURE = "connect_failure"
    TIMEOUT = "timeout"
    PROTOCOL_ERROR = "protocol_error"
    UNKNOWN_ERROR = "unknown_error"


class TinyHttpError(Exception):
    """Base class for every error raised by tinyhttp."""


class TransportError(TinyHttpError):
    """The transport could not complete an exchange."""

    def __init__(self, message: str, status: TransportErrorStatus = TransportErrorStatus.UNKNOWN_ERROR):
        super().__init__(message)
        self.status = status

    @property
    def cancelled(self) -> bool:
        return self.status == TransportErrorStatus.REQUEST_CANCELED


class MiddlewareError(TinyHttpError):
    """A middleware broke the continuation contract."""


class ResponseClosedError(TinyHttpError):
    """The response body was read after it was released."""

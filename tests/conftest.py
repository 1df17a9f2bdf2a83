"""Shared fixtures for the tinyhttp test suite."""

import httpx
import pytest

from tinyhttp import Http, Response, TransportError, TransportErrorStatus
from tinyhttp.configs import HttpConfig


class ScriptedTransport:
    """Transport that replays a list of outcomes; the last one repeats."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.requests = []
        self.closed = False

    async def send(self, request):
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(request)
        return outcome

    async def aclose(self):
        self.closed = True


def make_response(
    url="https://example.com/",
    status_code=200,
    body=b"",
    headers=None,
    content_type="text/plain",
):
    all_headers = {"content-length": str(len(body))}
    if content_type is not None:
        all_headers["content-type"] = content_type
    all_headers.update(headers or {})
    return Response(status_code=status_code, url=url, headers=all_headers, body=body)


def cancelled():
    return TransportError("connection dropped", TransportErrorStatus.REQUEST_CANCELED)


@pytest.fixture
def config():
    return HttpConfig(_env_file=None)


@pytest.fixture
def scripted(config):
    def factory(*outcomes, **overrides):
        transport = ScriptedTransport(outcomes)
        http_config = config.model_copy(update=overrides) if overrides else config
        return Http(transport=transport, config=http_config), transport

    return factory


@pytest.fixture
def responses():
    received = []

    def callback(response):
        received.append(response)

    callback.received = received
    return callback


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def cancel_error():
    return cancelled


def wire_response(status_code=200, headers=None, body=b""):
    """A response as a connection pool hands it over: body not yet read."""
    all_headers = {"Content-Length": str(len(body))}
    all_headers.update(headers or {})
    return httpx.Response(status_code, headers=all_headers, stream=httpx.ByteStream(body))


@pytest.fixture
def wire():
    return wire_response

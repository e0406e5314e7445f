"""Fake aiohttp objects and clocks shared by the test modules."""

import itertools
from unittest import mock

import aiohttp


class FakeContent:
    def __init__(self, body):
        self._body = body

    async def iter_chunked(self, size):
        for i in range(0, len(self._body), size):
            yield self._body[i:i + size]


class FakeResponse:
    """Async context manager standing in for ``aiohttp.ClientResponse``."""

    def __init__(self, status=200, body=b"", exc=None):
        self.status = status
        self.body = body
        self.exc = exc
        self.content = FakeContent(body)

    async def __aenter__(self):
        if self.exc is not None:
            raise self.exc
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                request_info=mock.Mock(real_url="https://example.invalid"),
                history=(),
                status=self.status,
                message="error",
            )

    async def read(self):
        return self.body

    async def text(self):
        return self.body.decode("utf-8") if isinstance(self.body, bytes) else self.body


def failure(message="Cannot connect to host"):
    return FakeResponse(exc=aiohttp.ClientConnectionError(message))


class FakeSession:
    """
    Hands out scripted responses in order, per HTTP method.

    Once a script runs out, *default* is returned for every further call.
    """

    def __init__(self, get=(), post=(), default=None):
        self._get = list(get)
        self._post = list(post)
        self.default = default or FakeResponse()
        self.calls = []

    def _next(self, queue):
        return queue.pop(0) if queue else self.default

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self._next(self._get)

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self._next(self._post)


class OutageSession(FakeSession):
    """Every request fails at the transport level."""

    def __init__(self):
        super().__init__(default=failure("Network is unreachable"))


def stepping_timer(step=0.125):
    """perf_counter stand-in advancing by *step* seconds per call."""
    counter = itertools.count()
    return lambda: next(counter) * step


class FakeClock:
    """Manually advanced wall clock in seconds."""

    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

from __future__ import annotations

from typing import Callable, Iterator

import httpx
import pytest

from postcode_nl import Client


class Recorder:
    """Stub transport that records requests and replays a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: bytes = b"{}"
        self.stream: httpx.SyncByteStream | None = None
        self.headers: list[tuple[str, str]] = []
        self.error: Exception | None = None

    def respond(self, status_code: int = 200, body: str | bytes = "{}", headers=None, *, stream=None) -> None:
        self.status_code = status_code
        self.body = body.encode() if isinstance(body, str) else body
        self.stream = stream
        self.headers = list(headers or [])

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.stream is not None:
            return httpx.Response(self.status_code, headers=self.headers, stream=self.stream)
        return httpx.Response(self.status_code, headers=self.headers, content=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_client(recorder: Recorder) -> Iterator[Callable[..., Client]]:
    clients: list[Client] = []

    def factory(*args, **kwargs) -> Client:
        if not args:
            args = ("my-key", "my-secret", "test platform")
        client = Client(*args, transport=httpx.MockTransport(recorder.handler), **kwargs)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def client(make_client) -> Client:
    return make_client()

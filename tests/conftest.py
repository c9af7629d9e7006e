"""Shared test fixtures for gcp_rest."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

import pytest

from gcp_rest.auth import StaticTokenProvider
from gcp_rest.client import Client

PUBSUB_ROOT = "https://pubsub.test/v1"
STORAGE_ROOT = "https://storage.test/storage/v1"
PROJECT = "test-project"


class FakeResponse:
    """Stands in for aiohttp.ClientResponse inside `async with`."""

    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self._body = body

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> bool:
        return False


class FakeSession:
    """Records outgoing requests and replays queued responses in order."""

    def __init__(self) -> None:
        self.closed = False
        self.requests: list[SimpleNamespace] = []
        self._queue: list[Any] = []

    def queue(self, status: int = 200, body: Any = None) -> None:
        if body is None:
            raw = b""
        elif isinstance(body, bytes):
            raw = body
        elif isinstance(body, str):
            raw = body.encode("utf-8")
        else:
            raw = json.dumps(body).encode("utf-8")
        self._queue.append(FakeResponse(status, raw))

    def queue_error(self, error: BaseException) -> None:
        self._queue.append(error)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        data = kwargs.get("data")
        self.requests.append(
            SimpleNamespace(
                method=method,
                url=url,
                headers=kwargs.get("headers", {}),
                data=data,
                json=json.loads(data) if data else None,
                timeout=kwargs.get("timeout"),
            )
        )
        if not self._queue:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self._queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> SimpleNamespace:
        return self.requests[-1]


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession) -> Client:
    return Client(
        PROJECT,
        StaticTokenProvider("test-token"),
        session=session,
        pubsub_root=PUBSUB_ROOT,
        storage_root=STORAGE_ROOT,
    )


def received_message(
    ack_id: str, data: str = "e30=", message_id: str = "m-1", attempt: int = 1
) -> dict[str, Any]:
    """Wire form of one entry of a pull response."""
    return {
        "ackId": ack_id,
        "message": {
            "data": data,
            "messageId": message_id,
            "publishTime": "2024-05-01T12:00:00.000Z",
        },
        "deliveryAttempt": attempt,
    }

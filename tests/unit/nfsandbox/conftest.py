# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Shared fixtures for nfsandbox unit tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from nfsandbox import Credentials

# Environment variables that affect credential and URL resolution.
# These are cleared before each test to ensure isolation.
NORTHFLANK_ENV_VARS = (
    "NORTHFLANK_TOKEN",
    "NORTHFLANK_PROJECT_ID",
    "NORTHFLANK_API_URL",
)

TEST_TOKEN = "test-token"
TEST_PROJECT_ID = "test-project"
TEST_BASE_URL = "https://api.example.test"


@pytest.fixture(autouse=True)
def clean_northflank_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear all Northflank env vars before each test.

    Tests stay deterministic regardless of the developer's local env, and
    the original environment is restored afterwards.
    """
    for var in NORTHFLANK_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo CLI logging configuration so handlers don't outlive CliRunner streams."""
    yield
    package_logger = logging.getLogger("nfsandbox")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def mock_token(monkeypatch: pytest.MonkeyPatch) -> str:
    """Set a mock NORTHFLANK_TOKEN for the test."""
    monkeypatch.setenv("NORTHFLANK_TOKEN", TEST_TOKEN)
    return TEST_TOKEN


@pytest.fixture
def mock_project_id(monkeypatch: pytest.MonkeyPatch) -> str:
    """Set a mock NORTHFLANK_PROJECT_ID for the test."""
    monkeypatch.setenv("NORTHFLANK_PROJECT_ID", TEST_PROJECT_ID)
    return TEST_PROJECT_ID


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(token=TEST_TOKEN, project_id=TEST_PROJECT_ID)


class FakeNorthflankAPI:
    """In-memory stand-in for the platform's HTTP API.

    Records every request. Service status answers are taken from
    `statuses` in order; the last one repeats.
    """

    def __init__(self, statuses: list[str | None] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.statuses = list(statuses or ["COMPLETED"])
        self.errors: dict[tuple[str, str], httpx.Response] = {}

    def fail(self, method: str, path: str, status_code: int, message: str = "boom") -> None:
        """Make the next matching request return an error response."""
        self.errors[(method, path)] = httpx.Response(
            status_code, json={"error": {"status": status_code, "message": message}}
        )

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def body(self, index: int) -> Any:
        return json.loads(self.requests[index].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.errors:
            return self.errors.pop(key)
        if request.method == "GET":
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            deployment = {} if status is None else {"status": status}
            return httpx.Response(
                200,
                json={"data": {"id": request.url.path.rsplit("/", 1)[-1],
                               "status": {"deployment": deployment}}},
            )
        if request.method == "DELETE":
            return httpx.Response(200, json={"data": {}})
        return httpx.Response(200, json={"data": json.loads(request.content or b"{}")})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_api() -> FakeNorthflankAPI:
    return FakeNorthflankAPI()


class FakeWebSocket:
    """Minimal async WebSocket connection yielding canned frames."""

    def __init__(
        self,
        frames: list[str | bytes],
        *,
        error: Exception | None = None,
        send_error: Exception | None = None,
    ) -> None:
        self.frames = list(frames)
        self.error = error
        self.send_error = send_error
        self.sent: list[str] = []
        self.closed = False

    async def send(self, message: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(message)

    async def close(self) -> None:
        self.closed = True

    def __aiter__(self) -> Any:
        return self._iterate()

    async def _iterate(self) -> Any:
        for frame in self.frames:
            yield frame
        if self.error is not None:
            raise self.error


class FakeConnect:
    """Replacement for websockets' connect() that returns a FakeWebSocket."""

    def __init__(self, ws: FakeWebSocket | None = None, *, error: Exception | None = None) -> None:
        self.ws = ws
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def __call__(self, url: str, **kwargs: Any) -> FakeWebSocket:
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        assert self.ws is not None
        return self.ws


def frame(kind: str, **fields: Any) -> str:
    return json.dumps({"type": kind, **fields})


@pytest.fixture
def make_connect() -> Callable[..., FakeConnect]:
    """Build a FakeConnect serving the given frames.

    Example:
        connect = make_connect([frame("stdout", data="hi\\n"), frame("exit", exitCode=0)])
    """

    def _make(
        frames: list[str | bytes] | None = None,
        *,
        stream_error: Exception | None = None,
        send_error: Exception | None = None,
        connect_error: Exception | None = None,
    ) -> FakeConnect:
        ws = FakeWebSocket(frames or [], error=stream_error, send_error=send_error)
        return FakeConnect(ws, error=connect_error)

    return _make

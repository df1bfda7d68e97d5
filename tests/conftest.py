# Shared fixtures: a scripted fake backend behind httpx.MockTransport.

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from inbo.api.client import ApiClient
from inbo.auth.credentials import MemoryCredentialStore
from inbo.cache import ResponseCache
from inbo.config import Settings

API = "https://api.test"
APP = "http://app.test"


class FakeBackend:
    """Answers requests from scripted routes and records everything it saw.

    ``on(method, path, status, body)`` queues a reply; the last queued reply
    for a route is repeated once the earlier ones are used up. A callable
    reply receives the request and returns an ``httpx.Response``.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Any]] = {}

    def on(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        self._routes.setdefault((method, path), []).append((status, body))

    def on_call(self, method: str, path: str, fn: Callable[[httpx.Request], Any]) -> None:
        self._routes.setdefault((method, path), []).append(fn)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(reply):
            result = reply(request)
            if not isinstance(result, httpx.Response):
                result = await result
            return result
        status, body = reply
        if isinstance(body, (str, bytes)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body if body is not None else {})

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


@pytest.fixture
def settings(tmp_path):
    return Settings(api_base_url=API, app_url=APP, config_dir=tmp_path)


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def cache():
    return ResponseCache()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
async def client(settings, store, backend, cache):
    async with ApiClient(
        settings, store, transport=httpx.MockTransport(backend), cache=cache
    ) as api:
        yield api

"""Shared fixtures: the relay app over ASGI, with a scripted fake agent API."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from planchat.config import settings
from planchat.main import app
from planchat.routers.proxy import get_http_client

UPSTREAM_URL = "http://agent.test"


class FakeUpstream:
    """Scripted stand-in for the agent API; records every request it sees."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self._script: list[httpx.Response | Exception] = []

    def reply(self, status_code: int = 200, *, json: Any = None, content: bytes | None = None) -> None:
        if content is not None:
            self._script.append(httpx.Response(status_code, content=content))
        else:
            self._script.append(httpx.Response(status_code, json=json if json is not None else {}))

    def fail(self, exc: Exception) -> None:
        self._script.append(exc)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if not self._script:
            return httpx.Response(200, json={})
        step = self._script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    def body(self, index: int = 0) -> Any:
        return json.loads(self.calls[index].content)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture(autouse=True)
def configured(monkeypatch):
    monkeypatch.setattr(settings, "external_api_base_url", UPSTREAM_URL)
    monkeypatch.setattr(settings, "app_name", "planning_agent")


@pytest_asyncio.fixture
async def client(upstream: FakeUpstream):
    upstream_http = AsyncClient(transport=httpx.MockTransport(upstream.handler))
    app.dependency_overrides[get_http_client] = lambda: upstream_http
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    await upstream_http.aclose()

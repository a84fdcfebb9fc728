"""Session identity tests."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import httpx
import pytest

from planchat.client.controller import ConversationController
from planchat.client.session import CookieFileStore, MemoryStore, SessionIdentityManager
from planchat.errors import UpstreamError

KEY = "planchat_session_id"
WEEK = timedelta(days=7)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


# ── Stores ───────────────────────────────────────────────────────────


def test_memory_store_expiry():
    clock = FakeClock()
    store = MemoryStore(clock=clock)
    store.set(KEY, "abc", WEEK)
    assert store.get(KEY) == "abc"

    clock.now += WEEK.total_seconds() - 1
    assert store.get(KEY) == "abc"

    clock.now += 1
    assert store.get(KEY) is None


def test_memory_store_missing_key():
    assert MemoryStore().get(KEY) is None


def test_cookie_file_store_persists(tmp_path):
    path = tmp_path / "state" / "cookies.txt"
    CookieFileStore(path, domain="localhost").set(KEY, "abc", WEEK)

    assert path.exists()
    assert "# Netscape HTTP Cookie File" in path.read_text()
    reloaded = CookieFileStore(path, domain="localhost")
    assert reloaded.get(KEY) == "abc"
    assert reloaded.get("other") is None


def test_cookie_file_store_scoped_to_domain(tmp_path):
    path = tmp_path / "cookies.txt"
    CookieFileStore(path, domain="relay.example").set(KEY, "abc", WEEK)
    assert CookieFileStore(path, domain="localhost").get(KEY) is None


def test_cookie_file_store_expired(tmp_path):
    path = tmp_path / "cookies.txt"
    store = CookieFileStore(path, domain="localhost")
    store.set(KEY, "stale", timedelta(seconds=-60))
    assert store.get(KEY) is None
    assert CookieFileStore(path, domain="localhost").get(KEY) is None


def test_cookie_file_store_corrupt_file(tmp_path):
    path = tmp_path / "cookies.txt"
    path.write_text("this is not a cookie file\n")

    store = CookieFileStore(path, domain="localhost")
    assert store.get(KEY) is None

    store.set(KEY, "fresh", WEEK)
    assert CookieFileStore(path, domain="localhost").get(KEY) == "fresh"


# ── SessionIdentityManager ───────────────────────────────────────────


def make_relay(**kwargs) -> AsyncMock:
    relay = AsyncMock()
    relay.initialize_session = AsyncMock(**kwargs)
    return relay


@pytest.mark.asyncio
async def test_existing_session_not_registered():
    store = MemoryStore()
    store.set(KEY, "stored-id", WEEK)
    relay = make_relay()
    manager = SessionIdentityManager(store, relay, key=KEY)

    session_id = await manager.ensure_session()

    assert session_id == "stored-id"
    assert await manager.wait_registered() is None
    relay.initialize_session.assert_not_awaited()


@pytest.mark.asyncio
async def test_new_session_registered_once():
    store = MemoryStore()
    relay = make_relay(return_value={"id": "x"})
    manager = SessionIdentityManager(store, relay, user_id="u_123", key=KEY)

    first = await manager.ensure_session()
    assert await manager.wait_registered() is True
    second = await manager.ensure_session()

    assert first == second
    assert store.get(KEY) == first
    relay.initialize_session.assert_awaited_once_with("u_123", first)
    assert manager.last_init_error is None


def test_new_ids_are_unique():
    relay = make_relay()
    ids = {SessionIdentityManager(MemoryStore(), relay, key=KEY).obtain()[0] for _ in range(20)}
    assert len(ids) == 20


@pytest.mark.asyncio
async def test_init_upstream_failure_is_not_fatal():
    store = MemoryStore()
    relay = make_relay(side_effect=UpstreamError("overloaded", status_code=503))
    manager = SessionIdentityManager(store, relay, key=KEY)

    session_id = await manager.ensure_session()

    assert await manager.wait_registered() is False
    assert store.get(KEY) == session_id
    assert manager.last_init_error == "overloaded"
    # not retried on the next call
    assert await manager.ensure_session() == session_id
    assert relay.initialize_session.await_count == 1


@pytest.mark.asyncio
async def test_init_transport_failure_is_not_fatal():
    store = MemoryStore()
    relay = make_relay(side_effect=httpx.ConnectError("[Errno 111] Connection refused"))
    manager = SessionIdentityManager(store, relay, key=KEY)

    session_id = await manager.ensure_session()

    assert await manager.wait_registered() is False
    assert store.get(KEY) == session_id
    assert manager.last_init_error == "Could not reach the relay."


@pytest.mark.asyncio
async def test_hung_registration_does_not_block_messaging():
    never = asyncio.Event()

    async def hang(*args):
        await never.wait()

    relay = make_relay(side_effect=hang)
    relay.send_message = AsyncMock(
        return_value=[{"author": "kaosai_planning_agent", "content": {"parts": [{"text": "hi"}]}}]
    )
    manager = SessionIdentityManager(MemoryStore(), relay, key=KEY, init_timeout=60)

    session_id = await asyncio.wait_for(manager.ensure_session(), timeout=1)
    controller = ConversationController(relay, session_id, assistant_author="kaosai_planning_agent")
    await asyncio.wait_for(controller.submit("hello"), timeout=1)

    assert [m.text for m in controller.messages] == ["hello", "hi"]
    assert not manager.registration.done()
    manager.registration.cancel()
    with pytest.raises(asyncio.CancelledError):
        await manager.wait_registered()


@pytest.mark.asyncio
async def test_registration_times_out():
    never = asyncio.Event()

    async def hang(*args):
        await never.wait()

    manager = SessionIdentityManager(MemoryStore(), make_relay(side_effect=hang), key=KEY, init_timeout=0.05)

    session_id = await manager.ensure_session()

    assert await manager.wait_registered() is False
    assert manager.last_init_error == "Session initialization timed out."
    assert manager.store.get(KEY) == session_id


@pytest.mark.asyncio
async def test_session_survives_restart(tmp_path):
    path = tmp_path / "cookies.txt"
    relay = make_relay()

    first_manager = SessionIdentityManager(CookieFileStore(path, domain="localhost"), relay, key=KEY)
    first = await first_manager.ensure_session()
    await first_manager.wait_registered()
    second = await SessionIdentityManager(CookieFileStore(path, domain="localhost"), relay, key=KEY).ensure_session()

    assert first == second
    relay.initialize_session.assert_awaited_once()

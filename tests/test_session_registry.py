"""Tests for the in-memory session registry."""

import asyncio

from backend import sessions


async def _no_wait(seconds):
    await asyncio.sleep(0)


async def test_least_recently_used_session_is_evicted(monkeypatch):
    monkeypatch.setattr(sessions, "_sessions", {})
    monkeypatch.setattr(sessions, "_sleep", _no_wait)
    monkeypatch.setattr(sessions, "MAX_SESSIONS", 2)

    first, _ = await sessions.create_session()
    second, second_session = await sessions.create_session()
    # Touching the first makes the second the least recently used
    assert sessions.get_session(first) is not None
    third, _ = await sessions.create_session()

    assert sessions.get_session(second) is None
    assert sessions.get_session(first) is not None
    assert sessions.get_session(third) is not None
    assert not second_session.text.active

    await sessions.close_all()
    assert sessions.get_session(first) is None


async def test_close_unknown_session(monkeypatch):
    monkeypatch.setattr(sessions, "_sessions", {})
    assert not await sessions.close_session("nope")
    assert await sessions.restart_session("nope") is None

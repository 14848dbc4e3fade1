"""In-memory registry of live game sessions.

Sessions are not persisted: a play-through always starts at node 0, and a
server restart drops every session. Each session reads the preferences and
scene names from config.json when it is created (and again on restart).

At most MAX_SESSIONS are kept. Creating one more closes the session that
was used least recently.

The sleeper handed to new sessions is module state so tests can swap in one
that does not wait (set_sleeper()).
"""

import asyncio
import logging
import uuid

from aware.engine import GameSession, Sleeper
from backend import storage

logger = logging.getLogger(__name__)

MAX_SESSIONS = 64

# Insertion order doubles as recency: lookups move a session to the end
_sessions: dict[str, GameSession] = {}
_sleep: Sleeper = asyncio.sleep


def set_sleeper(sleep: Sleeper) -> None:
    """Replace the sleeper used by sessions created from now on (used in tests)."""
    global _sleep
    _sleep = sleep


async def create_session() -> tuple[str, GameSession]:
    """Load the configured scenes, start the text scene, and register the session."""
    config = storage.get_config()
    session = GameSession(
        storage.load_text_scene(config["text_scene"]),
        storage.load_encounter(config["encounter"]),
        storage.get_preferences(),
        sleep=_sleep,
    )
    while len(_sessions) >= MAX_SESSIONS:
        stale = next(iter(_sessions))
        logger.info("Session %s evicted (limit %d)", stale, MAX_SESSIONS)
        await close_session(stale)

    session_id = uuid.uuid4().hex
    _sessions[session_id] = session
    logger.info("Session %s created (%s → %s)", session_id, config["text_scene"], config["encounter"])
    await session.begin()
    return session_id, session


def get_session(session_id: str) -> GameSession | None:
    session = _sessions.pop(session_id, None)
    if session is not None:
        _sessions[session_id] = session
    return session


async def restart_session(session_id: str) -> GameSession | None:
    session = get_session(session_id)
    if session is None:
        return None
    await session.restart(storage.get_preferences())
    await session.begin()
    return session


async def close_session(session_id: str) -> bool:
    session = _sessions.pop(session_id, None)
    if session is None:
        return False
    await session.close()
    return True


async def close_all() -> None:
    for session_id in list(_sessions):
        await close_session(session_id)

"""Game session endpoints: create, poll, choose, transition, restart."""

from fastapi import APIRouter, HTTPException

from aware.engine import GameSession
from backend import sessions

from .models import SelectChoiceBody

router = APIRouter()


def _session_or_404(session_id: str) -> GameSession:
    session = sessions.get_session(session_id)
    if session is None:
        raise HTTPException(404, "Session not found")
    return session


def _payload(session_id: str, session: GameSession) -> dict:
    return {"id": session_id, **session.snapshot().model_dump()}


@router.post("/sessions")
async def create_session(wait: bool = False):
    """Start a new play-through with the configured scenes and preferences."""
    session_id, session = await sessions.create_session()
    if wait:
        await session.settle()
    return _payload(session_id, session)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, wait: bool = False):
    """Poll a session. With wait=true, returns once the running driver has stopped."""
    session = _session_or_404(session_id)
    if wait:
        await session.settle()
    return _payload(session_id, session)


@router.post("/sessions/{session_id}/choices")
async def select_choice(session_id: str, body: SelectChoiceBody, wait: bool = False):
    """Pick one of the options currently on offer."""
    session = _session_or_404(session_id)
    if not await session.select_choice(body.option_id):
        raise HTTPException(409, "Option is not on offer")
    if wait:
        await session.settle()
    return _payload(session_id, session)


@router.post("/sessions/{session_id}/transition")
async def trigger_transition(session_id: str, wait: bool = False):
    """Leave the text scene once it is ready to transition."""
    session = _session_or_404(session_id)
    if not await session.trigger_transition():
        raise HTTPException(409, "Text scene is not ready to transition")
    if wait:
        await session.settle()
    return _payload(session_id, session)


@router.post("/sessions/{session_id}/encounter")
async def begin_encounter(session_id: str, wait: bool = False):
    """Confirm the transition screen and start the encounter."""
    session = _session_or_404(session_id)
    if not await session.begin_encounter():
        raise HTTPException(409, "No transition pending")
    if wait:
        await session.settle()
    return _payload(session_id, session)


@router.post("/sessions/{session_id}/restart")
async def restart_session(session_id: str, wait: bool = False):
    """Reset score and phase, re-read preferences and replay the text scene."""
    session = await sessions.restart_session(session_id)
    if session is None:
        raise HTTPException(404, "Session not found")
    if wait:
        await session.settle()
    return _payload(session_id, session)


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    """Stop a session and forget it."""
    if not await sessions.close_session(session_id):
        raise HTTPException(404, "Session not found")
    return {"ok": True}

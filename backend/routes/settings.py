"""Health check and settings endpoints."""

from fastapi import APIRouter, HTTPException

from backend import storage

from .models import UpdateSettings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get player preferences (language, pacing) and the active scene names."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: UpdateSettings):
    """Update settings (partial merge). Applies to sessions started afterwards."""
    try:
        return storage.update_config(body.model_dump(exclude_none=True))
    except ValueError as e:
        raise HTTPException(400, str(e))

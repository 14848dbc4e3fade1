"""Scene document endpoints (read-only)."""

from fastapi import APIRouter, HTTPException

from backend import storage

router = APIRouter()


@router.get("/scenes")
async def list_scenes():
    """List scene names (presets and user scenes)."""
    return storage.list_scenes()


@router.get("/scenes/{name}")
async def get_scene(name: str):
    """Get a scene document as stored."""
    scene = storage.get_scene(name)
    if scene is None:
        raise HTTPException(404, "Scene not found")
    return scene

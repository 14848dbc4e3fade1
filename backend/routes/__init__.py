"""FastAPI API endpoints under /api.

Endpoint groups: health + settings, scenes (read-only documents), and game
sessions. A session is created with POST /api/sessions and driven through its
child endpoints under /api/sessions/{id}/ (choices, transition, encounter,
restart). Clients poll GET /api/sessions/{id} for the event logs, the
typing/thinking flags and the options on offer.
"""

from fastapi import APIRouter

from .scenes import router as scenes_router
from .sessions import router as sessions_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(scenes_router)
router.include_router(sessions_router)

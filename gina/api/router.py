"""
Main API router. Mounts all sub-routers.
"""

from fastapi import APIRouter, Depends

from ..core.dependencies import require_user

router = APIRouter()


# ── Health (no auth) ─────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok", "service": "gina"}


# ── Auth (register/login open, the rest check the token per route) ──

from .auth import auth_router

router.include_router(auth_router)


# ── V1 routes ───────────────────────────────────────────────────────

from .chat import chat_router
from .conversations import conversations_router
from .intake import intake_router
from .journals import journals_router
from .memories import memories_router
from .tts import tts_router

# Chat and TTS accept anonymous users; everything else is per-user data.
router.include_router(chat_router, prefix="/v1")
router.include_router(conversations_router, prefix="/v1", dependencies=[Depends(require_user)])
router.include_router(intake_router, prefix="/v1", dependencies=[Depends(require_user)])
router.include_router(memories_router, prefix="/v1", dependencies=[Depends(require_user)])
router.include_router(journals_router, prefix="/v1", dependencies=[Depends(require_user)])
router.include_router(tts_router, prefix="/v1")

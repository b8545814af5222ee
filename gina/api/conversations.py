"""
Conversations API.

GET    /v1/conversations/latest - The saved history for the current user
DELETE /v1/conversations        - Clear all saved history
"""

import logging

from fastapi import APIRouter, Depends

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_store, require_user
from ..services.store import RecordStore

logger = logging.getLogger(__name__)

conversations_router = APIRouter(prefix="/conversations", tags=["conversations"])


@conversations_router.get("/latest")
async def latest_conversation(
    user: AuthenticatedUser = Depends(require_user),
    store: RecordStore = Depends(get_store),
):
    convo = await store.get_latest_conversation(user.user_id)
    if convo is None:
        return {"history": []}
    updated_at = convo["updated_at"]
    return {
        "history": convo["history"],
        "updatedAt": updated_at.isoformat() if updated_at else None,
    }


@conversations_router.delete("")
async def clear_conversations(
    user: AuthenticatedUser = Depends(require_user),
    store: RecordStore = Depends(get_store),
):
    await store.clear_history(user.user_id)
    return {"success": True}

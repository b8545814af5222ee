"""
Memories API.

GET  /v1/memories - The user's memory facts
POST /v1/memories - Shallow-merge new facts into memory
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_store, require_user
from ..services.store import RecordStore

memories_router = APIRouter(prefix="/memories", tags=["memories"])


class MemoryUpdate(BaseModel):
    facts: dict = Field(default_factory=dict)


@memories_router.get("")
async def get_memories(
    user: AuthenticatedUser = Depends(require_user),
    store: RecordStore = Depends(get_store),
):
    return {"facts": await store.get_facts(user.user_id) or {}}


@memories_router.post("")
async def merge_memories(
    body: MemoryUpdate,
    user: AuthenticatedUser = Depends(require_user),
    store: RecordStore = Depends(get_store),
):
    return {"facts": await store.merge_facts(user.user_id, body.facts)}

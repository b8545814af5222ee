"""
Intake API.

POST /v1/intake         - Save (merge) the questionnaire, returns the record
GET  /v1/intake         - The saved questionnaire or null
GET  /v1/intake/summary - Human-readable summary of intake + memory
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_store, require_user
from ..services.intake import submit_intake, summarize_intake
from ..services.store import RecordStore

logger = logging.getLogger(__name__)

intake_router = APIRouter(prefix="/intake", tags=["intake"])


class IntakeRequest(BaseModel):
    full_name: Optional[str] = None
    age: Optional[int] = None
    pronouns: Optional[str] = None
    location: Optional[str] = None
    presenting_issues: Optional[str] = None
    goals: Optional[str] = None
    symptoms: Optional[str] = None
    severity: Optional[int] = None
    duration: Optional[str] = None
    risk_factors: Optional[str] = None
    medications: Optional[str] = None
    history_therapy: Optional[str] = None
    preferences: Optional[str] = None
    availability: Optional[str] = None


@intake_router.post("")
async def save_intake(
    body: IntakeRequest,
    user: AuthenticatedUser = Depends(require_user),
    store: RecordStore = Depends(get_store),
):
    intake = await submit_intake(store, user.user_id, body.model_dump())
    return {"intake": intake}


@intake_router.get("")
async def get_intake(
    user: AuthenticatedUser = Depends(require_user),
    store: RecordStore = Depends(get_store),
):
    return {"intake": await store.get_intake(user.user_id)}


@intake_router.get("/summary")
async def intake_summary(
    user: AuthenticatedUser = Depends(require_user),
    store: RecordStore = Depends(get_store),
):
    intake = await store.get_intake(user.user_id)
    facts = await store.get_facts(user.user_id) or {}
    return {
        "summary": summarize_intake(intake, facts),
        "intake": intake,
        "facts": facts,
    }

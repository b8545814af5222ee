"""
Journals API.

POST   /v1/journals             - Create an entry
GET    /v1/journals             - Newest entries first
GET    /v1/journals/search      - Filter by text, tag and date range
PUT    /v1/journals/{journal_id} - Edit content and/or tags
DELETE /v1/journals/{journal_id} - Delete an entry
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import Text, cast, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_db, require_user
from ..models.journal import Journal

logger = logging.getLogger(__name__)

journals_router = APIRouter(prefix="/journals", tags=["journals"])

LIST_LIMIT = 50
LIST_LIMIT_MAX = 200
SEARCH_LIMIT = 100
SEARCH_LIMIT_MAX = 300


class JournalCreate(BaseModel):
    content: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class JournalUpdate(BaseModel):
    content: Optional[str] = None
    tags: Optional[list[str]] = None


def _escape_like(value: str) -> str:
    """Make % and _ match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_date(value: Optional[str], name: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid '{name}' date")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


async def _owned_entry(db: AsyncSession, user_id: str, journal_id: str) -> Journal:
    result = await db.execute(
        select(Journal).where(Journal.id == journal_id, Journal.user_id == user_id)
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        raise HTTPException(status_code=404, detail="Journal not found")
    return entry


@journals_router.post("")
async def create_journal(
    body: JournalCreate,
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    content = (body.content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Content is required")

    entry = Journal(user_id=user.user_id, content=content, tags=list(body.tags))
    db.add(entry)
    await db.flush()
    return {"journal": entry.to_dict()}


@journals_router.get("")
async def list_journals(
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    limit: int = Query(default=LIST_LIMIT, ge=1),
):
    result = await db.execute(
        select(Journal)
        .where(Journal.user_id == user.user_id)
        .order_by(Journal.created_at.desc())
        .limit(min(limit, LIST_LIMIT_MAX))
    )
    return {"journals": [j.to_dict() for j in result.scalars().all()]}


@journals_router.get("/search")
async def search_journals(
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    q: Optional[str] = None,
    tag: Optional[str] = None,
    from_: Optional[str] = Query(default=None, alias="from"),
    to: Optional[str] = None,
    limit: int = Query(default=SEARCH_LIMIT, ge=1),
):
    stmt = select(Journal).where(Journal.user_id == user.user_id)
    if q:
        stmt = stmt.where(Journal.content.ilike(f"%{_escape_like(q)}%", escape="\\"))
    if tag:
        # Tags live in a JSON array; match the encoded element in its text form
        needle = _escape_like(json.dumps(tag))
        stmt = stmt.where(cast(Journal.tags, Text).like(f"%{needle}%", escape="\\"))
    start = _parse_date(from_, "from")
    if start:
        stmt = stmt.where(Journal.created_at >= start)
    end = _parse_date(to, "to")
    if end:
        stmt = stmt.where(Journal.created_at <= end)

    result = await db.execute(
        stmt.order_by(Journal.created_at.desc()).limit(min(limit, SEARCH_LIMIT_MAX))
    )
    return {"journals": [j.to_dict() for j in result.scalars().all()]}


@journals_router.put("/{journal_id}")
async def update_journal(
    journal_id: str,
    body: JournalUpdate,
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    entry = await _owned_entry(db, user.user_id, journal_id)
    if body.content is not None:
        content = body.content.strip()
        if not content:
            raise HTTPException(status_code=400, detail="Content is required")
        entry.content = content
    if body.tags is not None:
        entry.tags = list(body.tags)
    await db.flush()
    return {"journal": entry.to_dict()}


@journals_router.delete("/{journal_id}")
async def delete_journal(
    journal_id: str,
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    entry = await _owned_entry(db, user.user_id, journal_id)
    await db.delete(entry)
    await db.flush()
    return {"success": True}

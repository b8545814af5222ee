"""
Record store for per-user blobs: conversation history, intake, memory facts.

Each call opens its own short-lived session, so detached background work
never shares a request's session. Every blob is read then replaced whole;
there is no version token, concurrent writers for one user are last-write-wins.
"""

import asyncio
import logging
from typing import Optional

from sqlalchemy import select, delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.conversation import Conversation
from ..models.intake import Intake, INTAKE_FIELDS
from ..models.memory import UserMemory

logger = logging.getLogger(__name__)


class RecordStore:
    """Atomic read/replace of each per-user record. No business logic."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._merge_lock = asyncio.Lock()

    # ── Intake ───────────────────────────────────────────────────────

    async def get_intake(self, user_id: str) -> Optional[dict]:
        async with self._session_factory() as db:
            intake = await self._intake_row(db, user_id)
            return intake.to_dict() if intake else None

    async def upsert_intake(self, user_id: str, payload: dict) -> dict:
        """
        Create or merge the intake record. Fields missing (or None) in the
        payload keep their stored value.
        """
        async with self._session_factory() as db:
            intake = await self._intake_row(db, user_id)
            if intake is None:
                intake = Intake(user_id=user_id)
                for name in INTAKE_FIELDS:
                    setattr(intake, name, payload.get(name) or None)
                db.add(intake)
            else:
                for name in INTAKE_FIELDS:
                    if payload.get(name) is not None:
                        setattr(intake, name, payload[name])
            await db.commit()
            return intake.to_dict()

    async def _intake_row(self, db: AsyncSession, user_id: str) -> Optional[Intake]:
        result = await db.execute(select(Intake).where(Intake.user_id == user_id))
        return result.scalar_one_or_none()

    # ── Memory facts ─────────────────────────────────────────────────

    async def get_facts(self, user_id: str) -> Optional[dict]:
        async with self._session_factory() as db:
            memory = await self._memory_row(db, user_id)
            return dict(memory.facts or {}) if memory else None

    async def replace_facts(self, user_id: str, facts: dict) -> dict:
        """Overwrite the whole facts object."""
        async with self._session_factory() as db:
            memory = await self._memory_row(db, user_id)
            if memory is None:
                memory = UserMemory(user_id=user_id, facts=dict(facts or {}))
                db.add(memory)
            else:
                memory.facts = dict(facts or {})
            await db.commit()
            return dict(memory.facts)

    async def merge_facts(self, user_id: str, updates: dict) -> dict:
        """
        Shallow merge: new keys overwrite same-named keys, the rest persist.
        Read and write happen under one lock, so two merges in this process
        never drop each other's keys. Same-key writes are still last-write-wins.
        """
        async with self._merge_lock:
            async with self._session_factory() as db:
                memory = await self._memory_row(db, user_id)
                if memory is None:
                    memory = UserMemory(user_id=user_id, facts=dict(updates or {}))
                    db.add(memory)
                else:
                    memory.facts = {**(memory.facts or {}), **(updates or {})}
                await db.commit()
                merged = dict(memory.facts)
        logger.debug("Merged facts for user=%s keys=%s", user_id, sorted((updates or {}).keys()))
        return merged

    async def _memory_row(self, db: AsyncSession, user_id: str) -> Optional[UserMemory]:
        result = await db.execute(select(UserMemory).where(UserMemory.user_id == user_id))
        return result.scalar_one_or_none()

    # ── Conversation history ─────────────────────────────────────────

    async def get_latest_conversation(self, user_id: str) -> Optional[dict]:
        """Returns {history, updated_at} for the most recently updated row."""
        async with self._session_factory() as db:
            convo = await self._latest_conversation(db, user_id)
            if convo is None:
                return None
            history = convo.history if isinstance(convo.history, list) else []
            return {"history": list(history), "updated_at": convo.updated_at}

    async def get_latest_history(self, user_id: str) -> Optional[list]:
        convo = await self.get_latest_conversation(user_id)
        return convo["history"] if convo else None

    async def replace_history(self, user_id: str, history: list[dict]) -> None:
        """Replace the live history wholesale, creating it if needed."""
        async with self._session_factory() as db:
            convo = await self._latest_conversation(db, user_id)
            if convo is None:
                db.add(Conversation(user_id=user_id, history=list(history)))
            else:
                convo.history = list(history)
            await db.commit()
        logger.debug("Saved history for user=%s (%d turns)", user_id, len(history))

    async def clear_history(self, user_id: str) -> None:
        async with self._session_factory() as db:
            await db.execute(sql_delete(Conversation).where(Conversation.user_id == user_id))
            await db.commit()
        logger.info("Cleared history for user=%s", user_id)

    async def _latest_conversation(self, db: AsyncSession, user_id: str) -> Optional[Conversation]:
        result = await db.execute(
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

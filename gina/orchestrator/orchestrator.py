"""
Chat turn orchestration.

Receive message → resolve history → build context → classify → complete
→ post-process → respond. Persistence and memory enrichment run as detached
tasks after the reply is ready:

  a. save the new history
  b. extract personal facts from the user message → merge into memory
  c. rewrite the running summary → merge into memory

The orchestrator keeps handles to those tasks so tests and shutdown can
await them with drain(). Nothing in a detached task can fail the turn.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Coroutine, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..core.flags import FeatureFlags, get_flags
from ..core.guardrails import check_input, check_output
from ..services import llm
from ..services.context import compose_context, format_live_metrics, build_prompt_context
from ..services.emotion import EmotionalContext, classify
from ..services.formatting import format_resources
from ..services.memory import (
    CompletionFn,
    EnrichmentError,
    StoreError,
    extract_personal_facts,
    summarize_exchange,
)
from ..services.store import RecordStore
from .history import CONTEXT_TURNS, append_exchange, normalize_history, recent_history
from .prompts import EMPATHY_PROMPT, FALLBACK_REPLY, SYSTEM_PROMPT

logger = logging.getLogger(__name__)

REPLY_TEMPERATURE = 0.7
REPLY_MAX_TOKENS = 500
REPLY_PRESENCE_PENALTY = 0.1
REPLY_FREQUENCY_PENALTY = 0.1


class InvalidTurnError(ValueError):
    """The request cannot be turned into a prompt (e.g. empty message)."""


@dataclass
class TurnResult:
    reply: str
    history_saved: bool
    history: list[dict] = field(default_factory=list)
    emotion: EmotionalContext = field(default_factory=EmotionalContext)
    used_fallback: bool = False
    # Detached persistence/enrichment tasks. Not awaited by handle_turn.
    tasks: list[asyncio.Task] = field(default_factory=list)


class TurnOrchestrator:
    def __init__(
        self,
        store: RecordStore,
        complete: CompletionFn = llm.complete,
        flags: Optional[FeatureFlags] = None,
        context_turns: int = CONTEXT_TURNS,
    ):
        self.store = store
        self.complete = complete
        self.flags = flags or get_flags()
        self.context_turns = context_turns
        self._tasks: set[asyncio.Task] = set()

    # ── Public API ───────────────────────────────────────────────────

    async def handle_turn(
        self,
        user_id: Optional[str],
        message: str,
        client_history: Optional[list] = None,
        live_metrics: Optional[dict] = None,
    ) -> TurnResult:
        start = time.monotonic()

        # 1. Validate
        check = check_input(message, user_id or "")
        if not check.allowed:
            raise InvalidTurnError(check.reason)

        # 2. Resolve history. Client-sent history wins when non-empty.
        history = normalize_history(client_history)
        if not history and user_id:
            history = await self._load_history(user_id)

        # 3. Build context
        tasks: list[asyncio.Task] = []
        profile_context = await self._load_profile_context(user_id) if user_id else ""
        live_block = ""
        if isinstance(live_metrics, dict) and live_metrics:
            live_block = format_live_metrics(live_metrics)
            if user_id:
                tasks.append(self._spawn(
                    self._persist_metrics(user_id, live_metrics), "persist_metrics",
                ))
        context = build_prompt_context(profile_context, live_block)

        # 4. Classify
        emotion = classify(message)

        # 5. Prompt
        messages = self.build_messages(message, history, context, emotion)

        # 6-7. Complete, then post-process successful replies only
        used_fallback = False
        try:
            reply = await self.complete(
                messages,
                temperature=REPLY_TEMPERATURE,
                max_tokens=REPLY_MAX_TOKENS,
                presence_penalty=REPLY_PRESENCE_PENALTY,
                frequency_penalty=REPLY_FREQUENCY_PENALTY,
            )
            if not reply or not reply.strip():
                raise ValueError("empty completion")
        except Exception as e:
            logger.error("Primary completion failed, using fallback reply: %s", e)
            reply = FALLBACK_REPLY
            used_fallback = True

        if not used_fallback:
            reply = self.post_process(reply)

        # 8. New history
        new_history = append_exchange(history, message, reply)

        # 9. Detached persistence + enrichment
        if user_id:
            tasks.append(self._spawn(self._save_history(user_id, new_history), "save_history"))
            if self.flags.use_fact_extraction:
                tasks.append(self._spawn(self._extract_facts(user_id, message), "extract_facts"))
            if self.flags.use_running_summary:
                tasks.append(self._spawn(
                    self._update_summary(user_id, message, reply), "update_summary",
                ))

        logger.info(
            "Turn done: user=%s history=%d empathy=%s fallback=%s %dms",
            user_id or "anonymous", len(history), emotion.needs_empathy,
            used_fallback, int((time.monotonic() - start) * 1000),
        )

        # 10. Return without waiting for step 9
        return TurnResult(
            reply=reply,
            history_saved=user_id is not None,
            history=new_history,
            emotion=emotion,
            used_fallback=used_fallback,
            tasks=tasks,
        )

    def build_messages(
        self,
        message: str,
        history: list[dict],
        context: str,
        emotion: EmotionalContext,
    ) -> list[dict]:
        """system prompt → optional context → last N history entries → user message."""
        system_prompt = SYSTEM_PROMPT
        if emotion.needs_empathy:
            system_prompt += EMPATHY_PROMPT

        messages = [{"role": "system", "content": system_prompt}]
        if context and context.strip():
            messages.append({"role": "system", "content": context})
        messages.extend(recent_history(history, self.context_turns))
        messages.append({"role": "user", "content": emotion.annotate(message)})
        return messages

    def post_process(self, reply: str) -> str:
        """Resource formatting + output guardrail. A failure keeps the raw reply."""
        try:
            if self.flags.use_resource_formatting:
                reply = format_resources(reply)
        except Exception as e:
            logger.warning("Resource formatting failed, sending reply as written: %s", e)
        checked = check_output(reply)
        if checked.modified_input is not None:
            reply = checked.modified_input
        return reply

    async def drain(self) -> None:
        """Wait for every in-flight detached task. Used by tests and shutdown."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    # ── Context loading (request path, degrades to empty) ────────────

    async def _load_history(self, user_id: str) -> list[dict]:
        try:
            return normalize_history(await self.store.get_latest_history(user_id))
        except SQLAlchemyError as e:
            logger.warning("Failed to load history for user=%s: %s", user_id, e)
            return []

    async def _load_profile_context(self, user_id: str) -> str:
        try:
            intake = await self.store.get_intake(user_id)
            facts = await self.store.get_facts(user_id)
        except SQLAlchemyError as e:
            logger.warning("Failed to load profile context for user=%s: %s", user_id, e)
            return ""
        return compose_context(intake, facts)

    # ── Detached tasks ───────────────────────────────────────────────

    def _spawn(self, coro: Coroutine, name: str) -> asyncio.Task:
        task = asyncio.create_task(self._run_detached(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_detached(self, coro: Coroutine, name: str) -> None:
        """The one place enrichment failures are turned into no-ops."""
        try:
            await coro
        except EnrichmentError as e:
            logger.warning("Background %s skipped: %s", name, e)
        except Exception as e:
            logger.exception("Background %s crashed: %s", name, e)

    async def _save_history(self, user_id: str, history: list[dict]) -> None:
        try:
            await self.store.replace_history(user_id, history)
        except SQLAlchemyError as e:
            raise StoreError(f"history save failed: {e}") from e

    async def _persist_metrics(self, user_id: str, metrics: dict) -> None:
        try:
            await self.store.merge_facts(user_id, {
                "lastMentalMetrics": metrics,
                "lastMetricsUpdatedAt": datetime.now(timezone.utc).isoformat(),
            })
        except SQLAlchemyError as e:
            raise StoreError(f"metrics save failed: {e}") from e

    async def _extract_facts(self, user_id: str, message: str) -> None:
        facts = await extract_personal_facts(self.complete, message)
        if not facts:
            return
        try:
            await self.store.merge_facts(user_id, facts)
        except SQLAlchemyError as e:
            raise StoreError(f"facts save failed: {e}") from e
        logger.info("Extracted %d fact(s) for user=%s", len(facts), user_id)

    async def _update_summary(self, user_id: str, message: str, reply: str) -> None:
        try:
            previous = (await self.store.get_facts(user_id) or {}).get("summary", "")
        except SQLAlchemyError as e:
            raise StoreError(f"summary read failed: {e}") from e
        summary = await summarize_exchange(self.complete, previous or "", message, reply)
        if not summary:
            return
        try:
            await self.store.merge_facts(user_id, {"summary": summary})
        except SQLAlchemyError as e:
            raise StoreError(f"summary save failed: {e}") from e

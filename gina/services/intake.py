"""
Intake questionnaire: therapy suggestion, memory sync and the readable summary.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION = "Supportive Therapy"

# Order matters: first match wins.
SUGGESTION_RULES = (
    (re.compile(r"trauma|ptsd"), "Trauma-focused CBT or EMDR"),
    (re.compile(r"anxiety|panic"), "CBT (with exposure)"),
    (re.compile(r"depress|sad|low mood"), "CBT or Behavioral Activation"),
    (re.compile(r"borderline|emotion regulation|self-harm"), "DBT (Dialectical Behavior Therapy)"),
    (re.compile(r"ocd|compulsion|obsess"), "ERP (Exposure and Response Prevention)"),
    (re.compile(r"relationship|couples"), "Couples Therapy (Emotion-Focused or Gottman)"),
)

SUMMARY_LABELS = (
    ("full_name", "Name"),
    ("age", "Age"),
    ("pronouns", "Pronouns"),
    ("location", "Location"),
    ("presenting_issues", "Presenting issues"),
    ("symptoms", "Symptoms"),
    ("severity", "Severity (1-5)"),
    ("duration", "Duration"),
    ("risk_factors", "Risk factors"),
    ("medications", "Medications"),
    ("history_therapy", "Past therapy"),
    ("goals", "Therapy goals"),
    ("preferences", "Preferences"),
    ("availability", "Availability"),
    ("suggestion", "Suggested therapy"),
)

EMPTY_SUMMARY = "No intake information saved yet."


def suggest_therapy(presenting_issues: Optional[str], symptoms: Optional[str]) -> str:
    issues = f"{presenting_issues or ''} {symptoms or ''}".lower()
    for pattern, suggestion in SUGGESTION_RULES:
        if pattern.search(issues):
            return suggestion
    return DEFAULT_SUGGESTION


def intake_memory_updates(payload: dict, current: dict, suggestion: str) -> dict:
    """Key intake fields folded into memory facts. Blank answers keep the old fact."""
    age = payload.get("age")
    return {
        "preferredName": payload.get("full_name") or current.get("preferredName"),
        "pronouns": payload.get("pronouns") or current.get("pronouns"),
        "age": age if age is not None else current.get("age"),
        "location": payload.get("location") or current.get("location"),
        "goals": payload.get("goals") or current.get("goals"),
        "presentingIssues": payload.get("presenting_issues") or current.get("presentingIssues"),
        "therapySuggestion": suggestion or current.get("therapySuggestion"),
        "intakeLastUpdated": datetime.now(timezone.utc).isoformat(),
    }


async def submit_intake(store: RecordStore, user_id: str, payload: dict) -> dict:
    """Save the intake (merge) with a fresh suggestion and sync it into memory."""
    suggestion = suggest_therapy(payload.get("presenting_issues"), payload.get("symptoms"))
    record = await store.upsert_intake(user_id, {**payload, "suggestion": suggestion})

    try:
        current = await store.get_facts(user_id) or {}
        await store.merge_facts(user_id, intake_memory_updates(payload, current, suggestion))
    except SQLAlchemyError as e:
        # The intake itself is saved; memory catches up on the next submission
        logger.warning("Failed to sync intake to memories for user=%s: %s", user_id, e)
    logger.info("Intake saved for user=%s (suggestion=%s)", user_id, suggestion)
    return record


def summarize_intake(intake: Optional[dict], facts: Optional[dict]) -> str:
    intake = intake or {}
    facts = facts or {}
    lines = [f"{label}: {intake[key]}" for key, label in SUMMARY_LABELS if intake.get(key)]
    if facts.get("summary"):
        lines.append(f"Conversation summary: {facts['summary']}")
    return "\n".join(lines) if lines else EMPTY_SUMMARY

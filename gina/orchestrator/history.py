"""
Conversation history helpers.

History is a plain list of {"role": "user"|"assistant", "content": str}.
Older clients send {"type": ...} instead of {"role": ...}; both are read.
"""

import logging
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

# Only this many of the most recent entries are replayed to the model.
# Older entries stay in storage.
CONTEXT_TURNS = 10


def normalize_turn(entry: dict) -> Optional[dict]:
    """Coerce one stored/client entry to {role, content}. None if unusable."""
    if not isinstance(entry, dict):
        return None
    content = entry.get("content")
    if content is None:
        return None
    raw_role = entry.get("role") or entry.get("type")
    role = "user" if raw_role == "user" else "assistant"
    return {"role": role, "content": str(content)}


def normalize_history(entries: Optional[Iterable]) -> list[dict]:
    if not entries:
        return []
    history = []
    for entry in entries:
        turn = normalize_turn(entry)
        if turn is not None:
            history.append(turn)
    return history


def recent_history(history: list[dict], limit: int = CONTEXT_TURNS) -> list[dict]:
    """The last `limit` entries, as model messages."""
    if limit <= 0:
        return []
    return [{"role": t["role"], "content": t["content"]} for t in history[-limit:]]


def append_exchange(history: list[dict], user_message: str, reply: str) -> list[dict]:
    """New history with exactly one user and one assistant entry added."""
    return [
        *history,
        {"role": "user", "content": user_message},
        {"role": "assistant", "content": reply},
    ]

"""
Guardrails — input/output validation layer.

Layers:
  1. Input validation (empty rejected, long logged)
  2. Crisis language detection (log only; the model's system prompt handles it)
  3. Output validation (response length)
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# ── Configuration ─────────────────────────────────────────────────────

MAX_MESSAGE_LENGTH = 10000       # Longer input is logged, not rejected
MAX_RESPONSE_LENGTH = 20000      # Max output response length

CRISIS_PATTERNS = [
    r"\bkill\s+myself\b",
    r"\bend\s+my\s+life\b",
    r"\bsuicid",
    r"\bself[-\s]?harm",
    r"\bwant\s+to\s+die\b",
]


@dataclass
class GuardrailResult:
    """Result of a guardrail check."""
    allowed: bool
    reason: Optional[str] = None
    modified_input: Optional[str] = None


# ── Input Guardrails ──────────────────────────────────────────────────

def check_input(message: Optional[str], user_id: str = "") -> GuardrailResult:
    """
    Validate user input before processing.
    Returns GuardrailResult with allowed=False if blocked.
    """

    # 1. Empty message
    if not message or not message.strip():
        return GuardrailResult(
            allowed=False,
            reason="Message is required",
        )

    # 2. Length. Never block: every non-empty message gets a reply.
    if len(message) > MAX_MESSAGE_LENGTH:
        logger.warning(
            "Long message from user=%s (%d chars)", user_id or "anonymous", len(message),
        )

    # 3. Crisis language. Never block: the companion must still answer,
    # and the system prompt carries the crisis resources.
    msg_lower = message.lower()
    for pattern in CRISIS_PATTERNS:
        if re.search(pattern, msg_lower):
            logger.warning("Crisis language detected from user=%s", user_id or "anonymous")
            break

    return GuardrailResult(allowed=True)


# ── Output Guardrails ─────────────────────────────────────────────────

def check_output(response: str) -> GuardrailResult:
    """
    Validate model output before sending to user.
    """

    if len(response) > MAX_RESPONSE_LENGTH:
        return GuardrailResult(
            allowed=True,
            modified_input=response[:MAX_RESPONSE_LENGTH] + "\n\n[Response truncated due to length]",
        )

    return GuardrailResult(allowed=True)

"""
Cross-session user memory: fact extraction and the running summary.

Both run after the reply is already on its way to the user. Failures are
raised as EnrichmentError subclasses so the one place that dispatches this
work can log and drop them.
"""

import json
import logging
import re
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

# complete(messages, *, temperature, max_tokens, ...) -> str
CompletionFn = Callable[..., Awaitable[str]]

FACT_EXTRACTION_SYSTEM = (
    "Extract only stable personal facts/preferences from the user message. "
    "Output strictly a JSON object with short snake_case keys. If none, return {}. "
    "Do NOT include explanations."
)
FACT_EXTRACTION_TEMPERATURE = 0.1
FACT_EXTRACTION_MAX_TOKENS = 200

SUMMARY_SYSTEM = "You are a concise conversation summarizer."
SUMMARY_TEMPERATURE = 0.3
SUMMARY_MAX_TOKENS = 200

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class EnrichmentError(Exception):
    """Best-effort memory work failed. Never shown to the user."""


class ProviderError(EnrichmentError):
    """The completion call failed."""


class StoreError(EnrichmentError):
    """Reading or writing the record store failed."""


def parse_facts(text: Optional[str]) -> dict:
    """
    Parse model output as a facts object. Model output is untrusted:
    anything that is not a JSON object becomes {}.
    """
    if not text:
        return {}
    candidate = text.strip()
    fenced = _FENCE_RE.match(candidate)
    if fenced:
        candidate = fenced.group(1)
    try:
        data = json.loads(candidate)
    except (json.JSONDecodeError, TypeError):
        logger.debug("Fact extraction returned non-JSON: %s", candidate[:100])
        return {}
    return data if isinstance(data, dict) else {}


async def extract_personal_facts(complete: CompletionFn, message: str) -> dict:
    """Ask the model for stable personal facts in the user message alone."""
    try:
        text = await complete(
            [
                {"role": "system", "content": FACT_EXTRACTION_SYSTEM},
                {"role": "user", "content": message},
            ],
            temperature=FACT_EXTRACTION_TEMPERATURE,
            max_tokens=FACT_EXTRACTION_MAX_TOKENS,
        )
    except Exception as e:
        raise ProviderError(f"fact extraction failed: {e}") from e
    return parse_facts(text)


def build_summary_prompt(previous_summary: str, user_message: str, reply: str) -> str:
    return (
        "Update the running summary of this user's conversation.\n"
        f"Previous summary:\n{previous_summary}\n\n"
        f"New exchange:\nUser: {user_message}\nAssistant: {reply}\n\n"
        "Return ONLY the updated concise summary (2-4 sentences)."
    )


async def summarize_exchange(
    complete: CompletionFn,
    previous_summary: str,
    user_message: str,
    reply: str,
) -> str:
    """Rewrite the running summary. Keeps the old one if the model returns nothing."""
    try:
        text = await complete(
            [
                {"role": "system", "content": SUMMARY_SYSTEM},
                {"role": "user", "content": build_summary_prompt(previous_summary, user_message, reply)},
            ],
            temperature=SUMMARY_TEMPERATURE,
            max_tokens=SUMMARY_MAX_TOKENS,
        )
    except Exception as e:
        raise ProviderError(f"summary update failed: {e}") from e
    return (text or "").strip() or previous_summary

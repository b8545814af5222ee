"""
User context for the chat prompt.

Merges memory facts, the intake record and mental metrics into one
system-role string. Pure formatting: missing or malformed inputs are
left out, never raised.

Precedence (first → last):
  facts (preferredName, pronouns, age, location, hobbies, support)
  → intake fields
  → facts.summary
  → MENTAL METRICS block from facts.lastMentalMetrics
"""

import logging
from numbers import Number
from typing import Any, Optional

logger = logging.getLogger(__name__)

PROFILE_HEADER = "USER PROFILE CONTEXT (authoritative intake + known facts):"
STORED_METRICS_HEADER = "MENTAL METRICS:"
LIVE_METRICS_HEADER = "MENTAL METRICS (user-reported):"
CONTEXT_PREAMBLE = (
    "Use the following context when helpful and accurate. "
    "If unclear, ask a short clarifying question."
)

FACT_LABELS = (
    ("preferredName", "Preferred name"),
    ("pronouns", "Pronouns"),
    ("age", "Age"),
    ("location", "Location"),
    ("hobbies", "Hobbies"),
    ("support", "Support network"),
)

INTAKE_LABELS = (
    ("full_name", "Intake name"),
    ("age", "Intake age"),
    ("pronouns", "Intake pronouns"),
    ("location", "Intake location"),
    ("presenting_issues", "Presenting issues"),
    ("goals", "Therapy goals"),
    ("symptoms", "Symptoms"),
    ("severity", "Severity (1-5)"),
    ("duration", "Duration"),
    ("risk_factors", "Risk factors"),
    ("medications", "Medications"),
    ("history_therapy", "Past therapy history"),
    ("preferences", "Preferences"),
    ("availability", "Availability"),
    ("suggestion", "Suggested therapy"),
)


def _fmt(value: Any) -> str:
    """Render a value the way a person would write it (72, not 72.0)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ", ".join(_fmt(v) for v in value)
    return str(value)


def _trend(trend: Any) -> str:
    if trend is None:
        return ""
    if isinstance(trend, Number) and not isinstance(trend, bool):
        sign = "+" if trend >= 0 else ""
        return f" (trend {sign}{_fmt(trend)})"
    return f" (trend {_fmt(trend)})"


def _joined(items: Any, label: str) -> str:
    if isinstance(items, list) and items:
        return f" — {label}: {', '.join(_fmt(i) for i in items)}"
    return ""


def _notes(notes: Any) -> str:
    return f" — Notes: {notes}" if notes else ""


def _wellbeing_line(wb: dict) -> Optional[str]:
    if wb.get("value") is None:
        return None
    return f"Wellbeing: {_fmt(wb['value'])}%{_trend(wb.get('trend'))}{_notes(wb.get('notes'))}"


def _stress_line(s: dict) -> Optional[str]:
    value, label = s.get("value"), s.get("label")
    if value is None and not label:
        return None
    value_part = f" ({_fmt(value)})" if value is not None else ""
    return (
        f"Stress level: {label or ''}{value_part}{_trend(s.get('trend'))}"
        f"{_joined(s.get('stressors'), 'Stressors')}{_notes(s.get('notes'))}"
    )


def _mood_line(m: dict) -> Optional[str]:
    value, intensity = m.get("value"), m.get("intensity")
    if not value and intensity is None:
        return None
    intensity_part = f" (intensity {_fmt(intensity)}/10)" if intensity is not None else ""
    return (
        f"Mood: {value or ''}{intensity_part}"
        f"{_joined(m.get('triggers'), 'Triggers')}{_notes(m.get('notes'))}"
    )


_METRIC_LINES = (
    ("wellbeing", _wellbeing_line),
    ("stressLevel", _stress_line),
    ("mood", _mood_line),
)


def format_metrics_lines(metrics: Any) -> list[str]:
    """
    Up to three lines (wellbeing, stress level, mood) for a metrics snapshot.
    A malformed sub-block is skipped; the others still render.
    """
    if not isinstance(metrics, dict):
        return []

    lines = []
    for key, render in _METRIC_LINES:
        block = metrics.get(key)
        if not block:
            continue
        try:
            line = render(block)
        except (AttributeError, TypeError, ValueError, KeyError) as e:
            logger.debug("Skipping malformed %s metrics: %s", key, e)
            continue
        if line:
            lines.append(line)
    return lines


def compose_context(intake: Optional[dict], facts: Optional[dict]) -> str:
    """
    Build the user profile context string. Returns "" when nothing is known,
    in which case the caller sends no context message at all.
    """
    facts = facts if isinstance(facts, dict) else {}
    parts: list[str] = []

    for key, label in FACT_LABELS:
        if facts.get(key):
            parts.append(f"{label}: {_fmt(facts[key])}")

    if isinstance(intake, dict):
        for key, label in INTAKE_LABELS:
            if intake.get(key):
                parts.append(f"{label}: {_fmt(intake[key])}")

    if facts.get("summary"):
        parts.append(f"Conversation summary: {facts['summary']}")

    metric_lines = format_metrics_lines(facts.get("lastMentalMetrics"))
    if metric_lines:
        parts.append(STORED_METRICS_HEADER)
        parts.extend(metric_lines)

    if not parts:
        return ""
    return f"{PROFILE_HEADER}\n- " + "\n- ".join(parts)


def format_live_metrics(metrics: Any) -> str:
    """The block for metrics sent with the current request. "" if none render."""
    lines = format_metrics_lines(metrics)
    if not lines:
        return ""
    return f"{LIVE_METRICS_HEADER}\n- " + "\n- ".join(lines)


def build_prompt_context(profile_context: str, live_metrics_block: str = "") -> str:
    """
    The full context system message: preamble + stored profile, then the
    live metrics block. Both may appear even when they disagree.
    """
    sections = []
    if profile_context:
        sections.append(f"{CONTEXT_PREAMBLE}\n{profile_context}")
    if live_metrics_block:
        sections.append(live_metrics_block)
    return "\n\n".join(sections)

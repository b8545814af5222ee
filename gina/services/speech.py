"""
Text-to-speech with a safe fallback voice.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from . import llm

logger = logging.getLogger(__name__)

# Voices the TTS model reliably previews. Anything else falls back to alloy.
SUPPORTED_VOICES = ("verse", "ember", "alloy", "aria", "coral", "sage")
DEFAULT_VOICE = "alloy"

SpeechFn = Callable[[str, str], Awaitable[bytes]]


class SpeechError(Exception):
    """Both the requested and the fallback voice failed."""


@dataclass
class SpeechResult:
    audio: bytes
    voice: str
    fallback: bool = False


def normalize_voice(voice: Optional[str]) -> str:
    v = str(voice or DEFAULT_VOICE).lower()
    return v if v in SUPPORTED_VOICES else DEFAULT_VOICE


async def synthesize(text: str, voice: Optional[str] = None, speak: SpeechFn = llm.speech) -> SpeechResult:
    chosen = normalize_voice(voice)
    try:
        return SpeechResult(audio=await speak(text, chosen), voice=chosen)
    except Exception as e:
        logger.warning("Primary TTS failed for voice %s: %s", chosen, e)
        if chosen == DEFAULT_VOICE:
            raise SpeechError(str(e)) from e

    try:
        return SpeechResult(audio=await speak(text, DEFAULT_VOICE), voice=DEFAULT_VOICE, fallback=True)
    except Exception as e:
        logger.error("Fallback TTS also failed: %s", e)
        raise SpeechError(str(e)) from e

"""
Text-to-speech API.

POST /v1/tts        - Speak text, returns audio/mpeg. Auth optional.
GET  /v1/tts/voices - Voices the UI can offer
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_optional_user
from ..core.flags import get_flags
from ..services.speech import DEFAULT_VOICE, SUPPORTED_VOICES, SpeechError, synthesize

logger = logging.getLogger(__name__)

tts_router = APIRouter(prefix="/tts", tags=["tts"])


class SpeechRequest(BaseModel):
    text: Optional[str] = None
    voice: Optional[str] = None


@tts_router.post("")
async def text_to_speech(
    body: SpeechRequest,
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    if not get_flags().use_tts:
        raise HTTPException(status_code=503, detail="Text-to-speech is disabled")

    text = (body.text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Text is required")

    try:
        result = await synthesize(text, body.voice)
    except SpeechError as e:
        logger.error("TTS failed for user=%s: %s", user.user_id if user else "anonymous", e)
        raise HTTPException(status_code=500, detail="TTS failed")

    return Response(
        content=result.audio,
        media_type="audio/mpeg",
        headers={
            "X-TTS-Voice-Used": result.voice,
            "X-TTS-Fallback": "true" if result.fallback else "false",
        },
    )


@tts_router.get("/voices")
async def list_voices():
    return {"voices": list(SUPPORTED_VOICES), "default": DEFAULT_VOICE}

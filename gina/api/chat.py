"""
Chat API.

POST /v1/chat - one turn with Gina. Auth optional: anonymous turns are
answered but nothing is personalized or saved.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_optional_user, get_orchestrator
from ..orchestrator.orchestrator import InvalidTurnError, TurnOrchestrator

logger = logging.getLogger(__name__)

chat_router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    conversation_history: list[dict] = Field(default_factory=list, alias="conversationHistory")
    mental_metrics: Optional[dict] = Field(default=None, alias="mentalMetrics")


class ChatResponse(BaseModel):
    reply: str
    timestamp: str
    persisted: bool = False


@chat_router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
):
    """Send a message to Gina. Memory updates finish after the response is sent."""
    try:
        result = await orchestrator.handle_turn(
            user_id=user.user_id if user else None,
            message=request.message or "",
            client_history=request.conversation_history,
            live_metrics=request.mental_metrics,
        )
    except InvalidTurnError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ChatResponse(
        reply=result.reply,
        timestamp=datetime.now(timezone.utc).isoformat(),
        persisted=result.history_saved,
    )

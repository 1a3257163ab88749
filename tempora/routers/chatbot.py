from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Any, Dict
import asyncio
import logging

from openai import OpenAIError

from ..database import get_db
from ..models.user import User
from ..schemas.chat import ChatRequest
from ..services.chat_service import (
    ChatService,
    AssistantUnavailableError,
    create_openai_client,
)
from ..dependencies.permissions import get_current_user
from ..utils.router_helpers import handle_service_errors

router = APIRouter(tags=["chatbot"])
logger = logging.getLogger(__name__)


def get_openai_client():
    try:
        return create_openai_client()
    except AssistantUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.post("", response_model=Dict[str, Any])
@handle_service_errors
async def chat(
    chat_request: ChatRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    client: Any = Depends(get_openai_client),
):
    """One assistant turn; the client keeps the conversation history"""
    service = ChatService(db, client)
    try:
        # The OpenAI client and the tool handlers block; keep them off the event loop
        message = await asyncio.to_thread(
            service.reply, current_user, chat_request.messages
        )
    except OpenAIError as e:
        logger.error(f"Assistant request failed for user {current_user.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Something went wrong while contacting the assistant.",
        )

    return {"message": message}

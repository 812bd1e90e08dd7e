"""
AI Chat API Routes

POST /api/ai/chat - Reply in an AI conversation as the owner's persona
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from chatgenius.ai_core.persona import PersonaReplyError
from chatgenius.api.deps import get_current_user, get_persona_service
from chatgenius.models.api_responses import PersonaReplyResponse
from chatgenius.models.chat import User
from chatgenius.services.persona_service import (
    BotNotFoundError,
    ConversationNotFoundError,
    PersonaReplyService,
)

logger = logging.getLogger(__name__)
router = APIRouter()


class AIChatRequest(BaseModel):
    conversation_id: str = Field(..., description="AI chat conversation id")
    user_message: str = Field(..., description="Message the persona should answer")


@router.post("/chat", response_model=PersonaReplyResponse)
async def ai_chat(
    request: AIChatRequest,
    user: User = Depends(get_current_user),
    service: PersonaReplyService = Depends(get_persona_service),
):
    """
    Generate the bot persona's reply and post it into the conversation.

    The bot answers in the style of its owner, learned from the owner's
    most recent messages.
    """
    if not request.conversation_id.strip() or not request.user_message.strip():
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        message_id = await service.reply(
            request.conversation_id, request.user_message, user_id=user.id
        )
    except (ConversationNotFoundError, BotNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersonaReplyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"Error in AI chat endpoint: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return PersonaReplyResponse(success=True, message_id=message_id)

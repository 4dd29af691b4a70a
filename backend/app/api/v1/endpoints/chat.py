from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.schemas.chat import ChatRequest, ChatResponse
from app.core.exceptions import ProviderCallError
from app.dependencies import get_chat_service, get_current_user
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from app.core.schemas.auth import AuthUser
    from app.core.services.chat_service import ChatService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/", response_model=ChatResponse)
async def chat_about_bookmarks(
    payload: ChatRequest,
    current_user: AuthUser = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """Answer a question using the user's most recent bookmarks as context."""
    try:
        reply = await service.reply(payload.message, user_id=current_user.id)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    except ProviderCallError as err:
        logger.warning("Chat provider call failed", extra={"error": str(err), "provider": err.provider})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to get chat response",
        ) from err
    except Exception as err:
        logger.error("Unexpected chat error", extra={"error": str(err), "user_id": str(current_user.id)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from err
    return ChatResponse(reply=reply)

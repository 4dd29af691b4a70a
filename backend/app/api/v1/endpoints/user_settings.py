from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.schemas.settings import AISettingsRead, AISettingsUpdate
from app.dependencies import get_current_user, get_settings_service
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from app.core.models.user_settings import UserAISettings
    from app.core.schemas.auth import AuthUser
    from app.core.services.settings_service import SettingsService

logger = get_logger(__name__)

router = APIRouter()


def _public_view(user_settings: UserAISettings) -> AISettingsRead:
    # Keys never leave the service
    return AISettingsRead(
        ai_provider=user_settings.ai_provider,
        has_openai_key=bool(user_settings.openai_api_key),
        has_anthropic_key=bool(user_settings.anthropic_api_key),
        has_completed_tour=user_settings.has_completed_tour,
    )


@router.get("/", response_model=AISettingsRead)
async def get_settings(
    current_user: AuthUser = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    return _public_view(await service.get_settings(current_user.id))


@router.put("/", response_model=AISettingsRead)
async def update_settings(
    payload: AISettingsUpdate,
    current_user: AuthUser = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    """Select the AI provider and store or clear API keys."""
    try:
        updated = await service.update_settings(payload, user_id=current_user.id)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    except Exception as err:
        logger.error("Failed to update settings", extra={"error": str(err), "user_id": str(current_user.id)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from err
    return _public_view(updated)

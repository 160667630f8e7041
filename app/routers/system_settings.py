# =============================================================================
# app/routers/system_settings.py - System Settings Endpoints
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query

from app.auth import get_current_user, AuthUser
from core.services.settings_service import SettingsService

router = APIRouter()


@router.get("")
async def list_settings(
    user: AuthUser = Depends(get_current_user),
    category: Annotated[str | None, Query()] = None,
):
    return {"success": True, "data": {"settings": SettingsService.list_settings(category)}}


@router.post("", status_code=201)
async def create_setting(
    payload: Annotated[dict[str, Any], Body()],
    user: AuthUser = Depends(get_current_user),
):
    """Create a setting. key, value, description and category are required."""
    setting = SettingsService.create_setting(payload, user.id)
    return {"success": True, "data": setting}


@router.put("")
async def update_settings(
    payload: Annotated[dict[str, Any], Body()],
    user: AuthUser = Depends(get_current_user),
):
    """
    Bulk update setting values.

    Body: {"updates": [{"key": "vat_rate", "value": "15"}]}
    """
    SettingsService.update_settings(payload.get("updates"), user.id)
    return {"success": True, "message": "Settings updated successfully"}

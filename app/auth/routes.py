# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-in and sign-up happen against Supabase Auth directly. These routes
# only report on the token the client already holds.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AccountProfile, AuthUser
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()

PROFILE_COLUMNS = "*, roles:role_id(id, name, description, permissions), branches:branch_id(id, name, code)"


@router.get("/me", response_model=AccountProfile)
async def get_current_account(user: AuthUser = Depends(get_current_user)) -> AccountProfile:
    """
    The current user's profile with role and branch.

    Users without a profile row yet get one built from the token.
    """
    try:
        profile = SupabaseClient.fetch_by_id("profiles", user.id, columns=PROFILE_COLUMNS)
    except SupabaseClientError as e:
        logger.warning(f"Could not fetch profile for {user.id}: {e}")
        profile = None

    if not profile:
        return AccountProfile(id=user.id, email=user.email)

    return AccountProfile(**{**profile, "email": user.email})


@router.get("/verify")
async def verify_token(user: AuthUser = Depends(get_current_user)) -> dict:
    """Confirm a stored token is still valid."""
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email,
    }

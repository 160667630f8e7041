# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Supabase JWT verification for every protected endpoint.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/branches")
#   async def list_branches(user: AuthUser = Depends(get_current_user)):
#       ...
# =============================================================================

from app.auth.dependencies import get_current_user, get_current_user_optional
from app.auth.models import AccountProfile, AuthUser

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "AuthUser",
    "AccountProfile",
]

# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    User identified by a verified Supabase JWT.

    Only what the token carries; no database round trip.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class AccountProfile(BaseModel):
    """
    The signed-in user's profile row (public.profiles) plus token email.

    Role and branch come embedded when the profile has them.
    """
    model_config = ConfigDict(extra="allow")

    id: UUID
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None
    roles: Optional[dict[str, Any]] = None
    branches: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

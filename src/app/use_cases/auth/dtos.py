"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class MagicLinkResponse(BaseModel):
    """Response for starting a passwordless sign-in"""

    status: str
    message: str


class SignInResponse(BaseModel):
    """Response for completing a magic-link sign-in"""

    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    is_new_profile: bool
    expires_at: Optional[datetime] = None


class SignOutResponse(BaseModel):
    """Response for signing out; redirect_to carries the reason code"""

    reason: str
    redirect_to: str

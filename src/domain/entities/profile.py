"""
UserProfile Entity

Application-level metadata attached to an identity-provider user.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import DensityPreference, PlatformRole, PortalContext, ProfileStatus


class UserProfile(SQLModel, table=True):
    """
    UserProfile entity - one per identity user.

    Business Rules:
    - id is the identity provider's user id (provider owns the user record)
    - Created on first successful sign-in completion
    - Never deleted: suspension/revocation are status changes
    - Only an active platform_admin is a platform administrator
    """

    __tablename__ = "user_profiles"

    id: UUID = Field(primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    display_name: Optional[str] = Field(default=None, max_length=255)

    platform_role: PlatformRole = Field(default=PlatformRole.platform_user)
    status: ProfileStatus = Field(default=ProfileStatus.active)
    density: DensityPreference = Field(default=DensityPreference.comfortable)

    default_tenant_id: Optional[UUID] = Field(default=None)
    default_context: Optional[PortalContext] = Field(default=None)
    can_manage_help: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_profile_status", "status"),)

"""
TenantMembership Entity

Links a user to a tenant with a role and a set of portal contexts.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import MembershipRole, MembershipStatus, PortalContext


class TenantMembership(SQLModel, table=True):
    """
    TenantMembership entity - user <-> tenant relationship.

    Business Rules:
    - (user_id, tenant_id) is unique
    - Created when an invitation is accepted
    - Never physically deleted; status transitions model lifecycle end
    - allowed_contexts is ordered; the first entry is the fallback context
    """

    __tablename__ = "tenant_memberships"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(nullable=False, index=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)

    role: MembershipRole = Field(default=MembershipRole.viewer)
    status: MembershipStatus = Field(default=MembershipStatus.pending)

    allowed_contexts: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    default_context: Optional[PortalContext] = Field(default=None)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_membership_user_tenant", "user_id", "tenant_id", unique=True),
        Index("idx_membership_status", "status"),
    )

    def contexts(self) -> List[PortalContext]:
        """Allowed contexts as enum members, unknown values dropped, order kept."""
        result: List[PortalContext] = []
        for value in self.allowed_contexts or []:
            try:
                context = PortalContext(value)
            except ValueError:
                continue
            if context not in result:
                result.append(context)
        return result

"""
Escalation Entities

Rules mapping (notification type, priority) to an SLA, and the immutable
events recorded when a rule fires.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import (
    EscalationStatus,
    NotificationPriority,
    NotificationType,
    PlatformRole,
)


class EscalationRule(SQLModel, table=True):
    """
    EscalationRule entity - configured by platform administrators.

    Business Rules:
    - (notification_type, priority, tenant_id) is unique
    - tenant_id NULL means the rule applies to every tenant
    - Inactive rules never fire
    """

    __tablename__ = "escalation_rules"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    notification_type: NotificationType = Field(nullable=False)
    priority: NotificationPriority = Field(nullable=False)
    sla_minutes: int = Field(default=60, ge=0)
    escalation_target_role: PlatformRole = Field(default=PlatformRole.platform_admin)
    tenant_id: Optional[UUID] = Field(default=None, foreign_key="tenants.id")
    is_active: bool = Field(default=True)

    created_by: Optional[UUID] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index(
            "idx_escalation_rule_scope",
            "notification_type",
            "priority",
            "tenant_id",
            unique=True,
        ),
    )


class EscalationEvent(SQLModel, table=True):
    """
    EscalationEvent entity - a rule firing for one notification.

    Business Rules:
    - Immutable apart from its single resolution
    - At most one event per notification
    """

    __tablename__ = "escalation_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    notification_id: UUID = Field(foreign_key="notifications.id", index=True)
    escalation_rule_id: UUID = Field(foreign_key="escalation_rules.id")
    original_recipient_id: UUID = Field(nullable=False)
    escalated_to_role: PlatformRole = Field(nullable=False)

    escalated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    status: EscalationStatus = Field(default=EscalationStatus.escalated)
    resolved_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    resolved_by: Optional[UUID] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    __table_args__ = (Index("idx_escalation_events_status", "status"),)

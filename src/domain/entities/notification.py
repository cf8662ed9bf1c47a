"""
Notification Entity

Append-only record of an event requiring attention.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import (
    NotificationPriority,
    NotificationType,
    ResolutionType,
    RetentionCategory,
)


class Notification(SQLModel, table=True):
    """
    Notification entity - governed record with strict retention.

    Business Rules:
    - Acknowledgment (user saw it) and resolution (underlying action
      completed) are independent facts
    - Resolution is outcome-driven, not user-driven
    - Never deleted: archived_at marks archival, row stays queryable
    - Critical retention categories are kept permanently
    """

    __tablename__ = "notifications"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    recipient_id: UUID = Field(nullable=False, index=True)
    tenant_id: Optional[UUID] = Field(default=None, foreign_key="tenants.id")

    notification_type: NotificationType = Field(nullable=False)
    priority: NotificationPriority = Field(default=NotificationPriority.normal)
    title: str = Field(max_length=255)
    message: str

    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    record_type: Optional[str] = Field(default=None, max_length=100)
    record_id: Optional[str] = Field(default=None, max_length=100)
    correlation_id: Optional[str] = Field(default=None, max_length=100)

    read_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    acknowledged_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    resolved_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    resolved_by: Optional[UUID] = Field(default=None)
    resolution_type: Optional[ResolutionType] = Field(default=None)

    requires_resolution: bool = Field(default=False)
    retention_category: RetentionCategory = Field(default=RetentionCategory.standard)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    archived_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_notifications_recipient_created", "recipient_id", "created_at"),
        Index("idx_notifications_type", "notification_type"),
        Index("idx_notifications_archive_candidates", "resolved_at", "archived_at"),
        Index("idx_notifications_retention", "retention_category", "created_at"),
    )

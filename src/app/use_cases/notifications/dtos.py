"""
Notification Use Case DTOs
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from src.domain.entities import Notification
from src.domain.policies.notifications import (
    can_dismiss_notification,
    is_permanently_retained,
)


class NotificationInfo(BaseModel):
    id: str
    notification_type: str
    priority: str
    title: str
    message: str
    tenant_id: Optional[str] = None
    record_type: Optional[str] = None
    record_id: Optional[str] = None
    metadata: Dict[str, Any] = {}
    created_at: datetime
    read_at: Optional[datetime] = None
    acknowledged_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolution_type: Optional[str] = None
    requires_resolution: bool
    retention_category: str
    permanently_retained: bool
    can_dismiss: bool

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationInfo":
        return cls(
            id=str(notification.id),
            notification_type=notification.notification_type.value,
            priority=notification.priority.value,
            title=notification.title,
            message=notification.message,
            tenant_id=str(notification.tenant_id) if notification.tenant_id else None,
            record_type=notification.record_type,
            record_id=notification.record_id,
            metadata=notification.event_metadata or {},
            created_at=notification.created_at,
            read_at=notification.read_at,
            acknowledged_at=notification.acknowledged_at,
            resolved_at=notification.resolved_at,
            resolution_type=(
                notification.resolution_type.value if notification.resolution_type else None
            ),
            requires_resolution=notification.requires_resolution,
            retention_category=notification.retention_category.value,
            permanently_retained=is_permanently_retained(notification),
            can_dismiss=can_dismiss_notification(notification),
        )


class NotificationListResponse(BaseModel):
    notifications: List[NotificationInfo]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class BulkUpdateResponse(BaseModel):
    updated: int

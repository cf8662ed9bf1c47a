"""
Notification Semantics

Acknowledgment records that a human saw a notification. Resolution records
that the underlying event reached an outcome. Neither implies the other, and
a notification that requires resolution cannot be dismissed by
acknowledging it.
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from src.domain.entities import (
    Notification,
    NotificationType,
    ResolutionType,
    RetentionCategory,
)

RESOLUTION_REQUIRED_TYPES = frozenset(
    {
        NotificationType.authority_change_proposal,
        NotificationType.licensing_request,
        NotificationType.payment_failure,
        NotificationType.approval_timeout,
        NotificationType.refund_initiated,
    }
)

_RETENTION_BY_TYPE = {
    NotificationType.authority_change_proposal: RetentionCategory.critical_authority,
    NotificationType.membership_change: RetentionCategory.critical_authority,
    NotificationType.payment_failure: RetentionCategory.critical_financial,
    NotificationType.refund_initiated: RetentionCategory.critical_financial,
    NotificationType.security_event: RetentionCategory.critical_security,
}

PERMANENT_RETENTION = frozenset(
    {
        RetentionCategory.critical_authority,
        RetentionCategory.critical_financial,
        RetentionCategory.critical_security,
    }
)


def requires_resolution(notification_type: NotificationType) -> bool:
    return NotificationType(notification_type) in RESOLUTION_REQUIRED_TYPES


def retention_category(notification_type: NotificationType) -> RetentionCategory:
    return _RETENTION_BY_TYPE.get(NotificationType(notification_type), RetentionCategory.standard)


def classify(notification: Notification) -> Notification:
    """Fill the type-derived fields on a notification about to be stored."""
    notification.requires_resolution = requires_resolution(notification.notification_type)
    notification.retention_category = retention_category(notification.notification_type)
    return notification


def is_resolved(notification: Notification) -> bool:
    return notification.resolved_at is not None


def is_acknowledged(notification: Notification) -> bool:
    return notification.acknowledged_at is not None


def can_dismiss_notification(notification: Notification) -> bool:
    if notification.requires_resolution:
        return is_resolved(notification)
    return is_acknowledged(notification) or is_resolved(notification)


def acknowledge(notification: Notification, now: datetime) -> bool:
    """Mark as seen. Returns False if it was already acknowledged."""
    if is_acknowledged(notification):
        return False
    notification.acknowledged_at = now
    if notification.read_at is None:
        notification.read_at = now
    return True


def resolve(
    notification: Notification,
    resolution_type: ResolutionType,
    resolved_by: Optional[UUID],
    now: datetime,
) -> bool:
    """Record the outcome of the underlying event. Returns False if already resolved."""
    if is_resolved(notification):
        return False
    notification.resolved_at = now
    notification.resolved_by = resolved_by
    notification.resolution_type = ResolutionType(resolution_type)
    return True


def is_permanently_retained(notification: Notification) -> bool:
    return notification.retention_category in PERMANENT_RETENTION


def archive_cutoff(now: datetime, archive_days: int) -> datetime:
    return now - timedelta(days=archive_days)


def is_archivable(notification: Notification, now: datetime, archive_days: int) -> bool:
    """Resolved, not yet archived, and resolved before the archive cutoff."""
    if notification.archived_at is not None or not is_resolved(notification):
        return False
    return notification.resolved_at <= archive_cutoff(now, archive_days)

"""
Notification Use Cases
"""

from .acknowledge_notification_use_case import (
    AcknowledgeAllNotificationsUseCase,
    AcknowledgeNotificationUseCase,
)
from .archive_notifications_use_case import ArchiveNotificationsUseCase
from .create_notification_use_case import CreateNotificationUseCase
from .dtos import (
    BulkUpdateResponse,
    NotificationInfo,
    NotificationListResponse,
    UnreadCountResponse,
)
from .list_notifications_use_case import GetUnreadCountUseCase, ListNotificationsUseCase
from .resolve_notification_use_case import ResolveNotificationUseCase

__all__ = [
    "AcknowledgeAllNotificationsUseCase",
    "AcknowledgeNotificationUseCase",
    "ArchiveNotificationsUseCase",
    "BulkUpdateResponse",
    "CreateNotificationUseCase",
    "GetUnreadCountUseCase",
    "ListNotificationsUseCase",
    "NotificationInfo",
    "NotificationListResponse",
    "ResolveNotificationUseCase",
    "UnreadCountResponse",
]

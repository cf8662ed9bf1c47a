from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Notification


class INotificationRepository(ABC):
    """Notification repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, notification_id: UUID) -> Optional[Notification]:
        """Get notification by ID"""
        pass

    @abstractmethod
    async def list_for_recipient(
        self, recipient_id: UUID, unread_only: bool = False, limit: int = 50
    ) -> List[Notification]:
        """Non-archived notifications for a recipient, newest first"""
        pass

    @abstractmethod
    async def count_unread(self, recipient_id: UUID) -> int:
        """Non-archived notifications not yet acknowledged"""
        pass

    @abstractmethod
    async def list_unacknowledged(self, recipient_id: UUID) -> List[Notification]:
        """Every non-archived, unacknowledged notification of a recipient"""
        pass

    @abstractmethod
    async def list_unresolved(self) -> List[Notification]:
        """Unresolved, non-archived notifications (escalation candidates)"""
        pass

    @abstractmethod
    async def list_archivable(self, resolved_before: datetime) -> List[Notification]:
        """Resolved before the cutoff and not yet archived"""
        pass

    @abstractmethod
    async def create(self, notification: Notification) -> Notification:
        """Create a new notification"""
        pass

    @abstractmethod
    async def update(self, notification: Notification) -> Notification:
        """Persist acknowledgment, resolution or archival fields"""
        pass

"""
Acknowledge Notification Use Cases

Acknowledgment means "seen". It never resolves anything.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.policies.notifications import acknowledge
from .dtos import BulkUpdateResponse, NotificationInfo


class AcknowledgeNotificationUseCase:
    """
    Business Rules:
    - Only the recipient acknowledges; anyone else gets NOTIFICATION_NOT_FOUND
    - Acknowledging twice keeps the first timestamp
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, recipient_id: UUID, notification_id: UUID) -> Result[NotificationInfo]:
        async with self.uow:
            notification = await self.uow.notifications.get_by_id(notification_id)
            if notification is None or notification.recipient_id != recipient_id:
                return Return.err(
                    Error("NOTIFICATION_NOT_FOUND", "Notification not found")
                )

            if acknowledge(notification, utcnow()):
                notification = await self.uow.notifications.update(notification)
                await self.uow.commit()

            return Return.ok(NotificationInfo.from_entity(notification))


class AcknowledgeAllNotificationsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, recipient_id: UUID) -> Result[BulkUpdateResponse]:
        async with self.uow:
            now = utcnow()
            pending = await self.uow.notifications.list_unacknowledged(recipient_id)
            for notification in pending:
                acknowledge(notification, now)
                await self.uow.notifications.update(notification)
            await self.uow.commit()

        return Return.ok(BulkUpdateResponse(updated=len(pending)))

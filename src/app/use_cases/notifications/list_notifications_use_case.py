"""
List Notifications Use Cases
"""

from uuid import UUID

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from .dtos import NotificationInfo, NotificationListResponse, UnreadCountResponse


class ListNotificationsUseCase:
    """Recipient's non-archived notifications, newest first"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, recipient_id: UUID, unread_only: bool = False, limit: int = 50
    ) -> Result[NotificationListResponse]:
        async with self.uow:
            notifications = await self.uow.notifications.list_for_recipient(
                recipient_id, unread_only=unread_only, limit=limit
            )
            unread = await self.uow.notifications.count_unread(recipient_id)

            return Return.ok(
                NotificationListResponse(
                    notifications=[NotificationInfo.from_entity(n) for n in notifications],
                    unread_count=unread,
                )
            )


class GetUnreadCountUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, recipient_id: UUID) -> Result[UnreadCountResponse]:
        async with self.uow:
            unread = await self.uow.notifications.count_unread(recipient_id)
        return Return.ok(UnreadCountResponse(unread_count=unread))

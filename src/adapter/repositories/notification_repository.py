from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.notification_repository import INotificationRepository
from src.domain.entities import Notification


class NotificationRepository(INotificationRepository):
    """Notification repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _visible(self, recipient_id: UUID):
        return select(Notification).where(
            Notification.recipient_id == recipient_id,
            Notification.archived_at.is_(None),
        )

    async def get_by_id(self, notification_id: UUID) -> Optional[Notification]:
        stmt = select(Notification).where(Notification.id == notification_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_recipient(
        self, recipient_id: UUID, unread_only: bool = False, limit: int = 50
    ) -> List[Notification]:
        stmt = self._visible(recipient_id)
        if unread_only:
            stmt = stmt.where(Notification.acknowledged_at.is_(None))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_unread(self, recipient_id: UUID) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.recipient_id == recipient_id,
            Notification.archived_at.is_(None),
            Notification.acknowledged_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_unacknowledged(self, recipient_id: UUID) -> List[Notification]:
        stmt = self._visible(recipient_id).where(Notification.acknowledged_at.is_(None))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_unresolved(self) -> List[Notification]:
        stmt = select(Notification).where(
            Notification.resolved_at.is_(None),
            Notification.archived_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_archivable(self, resolved_before: datetime) -> List[Notification]:
        stmt = select(Notification).where(
            Notification.resolved_at.is_not(None),
            Notification.resolved_at <= resolved_before,
            Notification.archived_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, notification: Notification) -> Notification:
        self.session.add(notification)
        await self.session.flush()
        await self.session.refresh(notification)
        return notification

    async def update(self, notification: Notification) -> Notification:
        self.session.add(notification)
        await self.session.flush()
        await self.session.refresh(notification)
        return notification

from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.escalation_repository import (
    IEscalationEventRepository,
    IEscalationRuleRepository,
)
from src.domain.entities import (
    EscalationEvent,
    EscalationRule,
    EscalationStatus,
    NotificationPriority,
    NotificationType,
)


class EscalationRuleRepository(IEscalationRuleRepository):
    """EscalationRule repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> List[EscalationRule]:
        stmt = select(EscalationRule).order_by(
            EscalationRule.notification_type, EscalationRule.priority
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_active(self) -> List[EscalationRule]:
        stmt = select(EscalationRule).where(EscalationRule.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_scope(
        self,
        notification_type: NotificationType,
        priority: NotificationPriority,
        tenant_id: Optional[UUID],
    ) -> Optional[EscalationRule]:
        stmt = select(EscalationRule).where(
            EscalationRule.notification_type == notification_type,
            EscalationRule.priority == priority,
        )
        if tenant_id is None:
            stmt = stmt.where(EscalationRule.tenant_id.is_(None))
        else:
            stmt = stmt.where(EscalationRule.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def save(self, rule: EscalationRule) -> EscalationRule:
        self.session.add(rule)
        await self.session.flush()
        await self.session.refresh(rule)
        return rule


class EscalationEventRepository(IEscalationEventRepository):
    """EscalationEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, event_id: UUID) -> Optional[EscalationEvent]:
        stmt = select(EscalationEvent).where(EscalationEvent.id == event_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_notification_ids(
        self, notification_ids: List[UUID]
    ) -> List[EscalationEvent]:
        if not notification_ids:
            return []
        stmt = select(EscalationEvent).where(
            EscalationEvent.notification_id.in_(notification_ids)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_events(
        self, status: Optional[EscalationStatus] = None, limit: int = 50
    ) -> List[EscalationEvent]:
        stmt = select(EscalationEvent)
        if status is not None:
            stmt = stmt.where(EscalationEvent.status == status)
        stmt = stmt.order_by(EscalationEvent.escalated_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, event: EscalationEvent) -> EscalationEvent:
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    async def update(self, event: EscalationEvent) -> EscalationEvent:
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

"""
Escalation Event Use Cases
"""

from typing import List, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.audit_logger import AuditActions, ResourceTypes, build_audit_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import EscalationStatus
from .dtos import EscalationEventInfo


class ListEscalationEventsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, status: Optional[EscalationStatus] = None, limit: int = 50
    ) -> Result[List[EscalationEventInfo]]:
        async with self.uow:
            events = await self.uow.escalation_events.list_events(status=status, limit=limit)
            return Return.ok([EscalationEventInfo.from_entity(e) for e in events])


class ResolveEscalationUseCase:
    """
    Business Rules:
    - Events are immutable apart from one resolution
    - Resolving the escalation does not resolve the notification
    - Creates audit event
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor_id: UUID, event_id: UUID, notes: Optional[str] = None
    ) -> Result[EscalationEventInfo]:
        async with self.uow:
            event = await self.uow.escalation_events.get_by_id(event_id)
            if event is None:
                return Return.err(
                    Error("ESCALATION_NOT_FOUND", "Escalation event not found")
                )
            if event.status == EscalationStatus.resolved:
                return Return.err(
                    Error("ALREADY_RESOLVED", "Escalation is already resolved")
                )

            event.status = EscalationStatus.resolved
            event.resolved_at = utcnow()
            event.resolved_by = actor_id
            event.notes = notes
            event = await self.uow.escalation_events.update(event)

            await self.uow.audit_events.create(
                build_audit_event(
                    AuditActions.ESCALATION_RESOLVED,
                    ResourceTypes.ESCALATION_EVENT,
                    actor_id=actor_id,
                    resource_id=event.id,
                    details={"notes": notes} if notes else {},
                )
            )
            await self.uow.commit()

        return Return.ok(EscalationEventInfo.from_entity(event))

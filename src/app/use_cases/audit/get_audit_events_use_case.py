"""
Get Audit Events Use Case

Retrieves audit events with cursor pagination.
"""

from typing import Optional
from uuid import UUID

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from .dtos import AuditEventInfo, AuditEventPage


class GetAuditEventsUseCase:
    """
    Use case for reading the audit log.

    Business Rules:
    - Caller is checked for platform:view_audit_logs before this runs
    - Optional tenant and action filters
    - Results ordered by newest first, cursor-based pagination
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        tenant_id: Optional[UUID] = None,
        action: Optional[str] = None,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Result[AuditEventPage]:
        async with self.uow:
            events, next_cursor = await self.uow.audit_events.list_paginated(
                tenant_id=tenant_id, action=action, limit=limit, cursor=cursor
            )

            return Return.ok(
                AuditEventPage(
                    events=[
                        AuditEventInfo(
                            id=str(event.id),
                            action=event.action,
                            resource_type=event.resource_type,
                            resource_id=event.resource_id,
                            actor_id=str(event.actor_id) if event.actor_id else None,
                            tenant_id=str(event.tenant_id) if event.tenant_id else None,
                            details=event.event_metadata or {},
                            created_at=event.created_at,
                        )
                        for event in events
                    ],
                    next_cursor=next_cursor,
                )
            )

"""
Write Audit Event Use Case

Appends one entry to the audit log on behalf of a caller.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.audit_logger import build_audit_event
from src.app.services.unit_of_work import UnitOfWork
from .dtos import AuditWriteResponse


class WriteAuditEventUseCase:
    """
    Business Rules:
    - action and resource_type are required
    - actor defaults to the calling user
    - Entries are append-only
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        caller_id: Optional[UUID],
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        tenant_id: Optional[UUID] = None,
        actor_id: Optional[UUID] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[AuditWriteResponse]:
        if not action or not resource_type:
            return Return.err(
                Error("VALIDATION_ERROR", "action and resource_type are required")
            )

        async with self.uow:
            event = await self.uow.audit_events.create(
                build_audit_event(
                    action,
                    resource_type,
                    actor_id=actor_id or caller_id,
                    resource_id=resource_id,
                    tenant_id=tenant_id,
                    details=details,
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
            )
            await self.uow.commit()

        return Return.ok(
            AuditWriteResponse(success=True, id=str(event.id), created_at=event.created_at)
        )

"""
Archive Notifications Use Case

Marks old resolved notifications archived. Rows are never deleted.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from libs.result import Result, Return
from src.app.services.audit_logger import AuditActions, ResourceTypes, build_audit_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.policies.notifications import archive_cutoff
from .dtos import BulkUpdateResponse

logger = logging.getLogger(__name__)


class ArchiveNotificationsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        archive_days: int,
        actor_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
    ) -> Result[BulkUpdateResponse]:
        now = now or utcnow()
        async with self.uow:
            candidates = await self.uow.notifications.list_archivable(
                archive_cutoff(now, archive_days)
            )
            for notification in candidates:
                notification.archived_at = now
                await self.uow.notifications.update(notification)

            if candidates:
                await self.uow.audit_events.create(
                    build_audit_event(
                        AuditActions.NOTIFICATIONS_ARCHIVED,
                        ResourceTypes.NOTIFICATION,
                        actor_id=actor_id,
                        details={"count": len(candidates), "archive_days": archive_days},
                    )
                )
            await self.uow.commit()

        logger.info("Archived %d notifications", len(candidates))
        return Return.ok(BulkUpdateResponse(updated=len(candidates)))

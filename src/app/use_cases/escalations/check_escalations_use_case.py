"""
Check Escalations Use Case

Fires escalation rules for unresolved notifications whose SLA has lapsed.
"""

import logging
from datetime import datetime
from typing import Optional

from libs.result import Result, Return
from src.app.services.audit_logger import AuditActions, ResourceTypes, build_audit_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.policies.escalation import evaluate_escalation, select_rule
from .dtos import EscalationCheckResponse, EscalationEventInfo

logger = logging.getLogger(__name__)


class CheckEscalationsUseCase:
    """
    Business Rules:
    - Only unresolved, non-archived notifications are candidates
    - Acknowledged notifications still escalate
    - Tenant-specific rules take precedence over global ones
    - At most one escalation event per notification
    - escalated_at is the SLA deadline (created_at + sla_minutes)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, now: Optional[datetime] = None) -> Result[EscalationCheckResponse]:
        now = now or utcnow()
        created = []
        async with self.uow:
            candidates = await self.uow.notifications.list_unresolved()
            rules = await self.uow.escalation_rules.list_active()
            existing = await self.uow.escalation_events.get_by_notification_ids(
                [n.id for n in candidates]
            )

            for notification in candidates:
                rule = select_rule(rules, notification)
                event = evaluate_escalation(notification, rule, existing, now)
                if event is None:
                    continue
                event = await self.uow.escalation_events.create(event)
                created.append(event)
                await self.uow.audit_events.create(
                    build_audit_event(
                        AuditActions.ESCALATION_TRIGGERED,
                        ResourceTypes.ESCALATION_EVENT,
                        resource_id=event.id,
                        tenant_id=notification.tenant_id,
                        details={
                            "notification_id": str(notification.id),
                            "rule_id": str(rule.id),
                            "sla_minutes": rule.sla_minutes,
                        },
                    )
                )
            await self.uow.commit()

        if created:
            logger.info("Escalated %d notifications", len(created))
        return Return.ok(
            EscalationCheckResponse(
                checked=len(candidates),
                escalated=[EscalationEventInfo.from_entity(e) for e in created],
            )
        )

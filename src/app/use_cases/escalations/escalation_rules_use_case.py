"""
Escalation Rule Use Cases

Listing, saving and seeding the SLA rules that drive escalation.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.audit_logger import AuditActions, ResourceTypes, build_audit_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    EscalationRule,
    NotificationPriority,
    NotificationType,
    PlatformRole,
)
from src.domain.policies.escalation import DEFAULT_SLAS, default_rule
from .dtos import EscalationRuleInfo, EscalationRulesResponse, SlaDefaultInfo


class ListEscalationRulesUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[EscalationRulesResponse]:
        async with self.uow:
            rules = await self.uow.escalation_rules.list_all()

            return Return.ok(
                EscalationRulesResponse(
                    rules=[EscalationRuleInfo.from_entity(r) for r in rules],
                    defaults=[SlaDefaultInfo.from_definition(s) for s in DEFAULT_SLAS],
                )
            )


class UpsertEscalationRuleUseCase:
    """
    Business Rules:
    - One rule per (type, priority, tenant); saving an existing scope updates it
    - sla_minutes >= 0; 0 escalates at creation time
    - Creates audit event
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        actor_id: UUID,
        notification_type: NotificationType,
        priority: NotificationPriority,
        sla_minutes: int,
        escalation_target_role: PlatformRole = PlatformRole.platform_admin,
        tenant_id: Optional[UUID] = None,
        is_active: bool = True,
    ) -> Result[EscalationRuleInfo]:
        if sla_minutes < 0:
            return Return.err(
                Error("INVALID_SLA", "sla_minutes must be zero or positive")
            )

        async with self.uow:
            rule = await self.uow.escalation_rules.get_by_scope(
                NotificationType(notification_type), NotificationPriority(priority), tenant_id
            )
            if rule is None:
                rule = EscalationRule(
                    notification_type=NotificationType(notification_type),
                    priority=NotificationPriority(priority),
                    tenant_id=tenant_id,
                    created_by=actor_id,
                )
            rule.sla_minutes = sla_minutes
            rule.escalation_target_role = PlatformRole(escalation_target_role)
            rule.is_active = is_active
            rule.updated_at = utcnow()
            rule = await self.uow.escalation_rules.save(rule)

            await self.uow.audit_events.create(
                build_audit_event(
                    AuditActions.ESCALATION_RULE_SAVED,
                    ResourceTypes.ESCALATION_RULE,
                    actor_id=actor_id,
                    resource_id=rule.id,
                    tenant_id=tenant_id,
                    details={
                        "notification_type": rule.notification_type.value,
                        "priority": rule.priority.value,
                        "sla_minutes": sla_minutes,
                        "is_active": is_active,
                    },
                )
            )
            await self.uow.commit()

        return Return.ok(EscalationRuleInfo.from_entity(rule))


class SeedEscalationRulesUseCase:
    """Create global rules from the default SLA table where none exist yet"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, actor_id: Optional[UUID] = None) -> Result[EscalationRulesResponse]:
        async with self.uow:
            for sla in DEFAULT_SLAS:
                rule = default_rule(sla)
                if rule is None:
                    continue
                existing = await self.uow.escalation_rules.get_by_scope(
                    sla.notification_type, sla.priority, None
                )
                if existing is None:
                    rule.created_by = actor_id
                    await self.uow.escalation_rules.save(rule)
            await self.uow.commit()
            rules = await self.uow.escalation_rules.list_all()

            return Return.ok(
                EscalationRulesResponse(
                    rules=[EscalationRuleInfo.from_entity(r) for r in rules],
                    defaults=[SlaDefaultInfo.from_definition(s) for s in DEFAULT_SLAS],
                )
            )

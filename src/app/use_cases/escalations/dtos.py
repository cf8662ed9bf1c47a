"""
Escalation Use Case DTOs
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import EscalationEvent, EscalationRule
from src.domain.policies.escalation import SlaDefinition, format_sla_duration, sla_category


class EscalationRuleInfo(BaseModel):
    id: str
    notification_type: str
    priority: str
    sla_minutes: int
    sla_display: str
    escalation_target_role: str
    tenant_id: Optional[str] = None
    is_active: bool
    updated_at: datetime

    @classmethod
    def from_entity(cls, rule: EscalationRule) -> "EscalationRuleInfo":
        return cls(
            id=str(rule.id),
            notification_type=rule.notification_type.value,
            priority=rule.priority.value,
            sla_minutes=rule.sla_minutes,
            sla_display=format_sla_duration(rule.sla_minutes),
            escalation_target_role=rule.escalation_target_role.value,
            tenant_id=str(rule.tenant_id) if rule.tenant_id else None,
            is_active=rule.is_active,
            updated_at=rule.updated_at,
        )


class SlaDefaultInfo(BaseModel):
    notification_type: str
    priority: str
    category: str
    initial_notification: str
    escalation: Optional[str] = None
    executive_escalation: Optional[str] = None
    requires_manual_escalation: bool
    description: str

    @classmethod
    def from_definition(cls, sla: SlaDefinition) -> "SlaDefaultInfo":
        def display(minutes):
            return None if minutes is None else format_sla_duration(minutes)

        return cls(
            notification_type=sla.notification_type.value,
            priority=sla.priority.value,
            category=sla_category(sla.notification_type),
            initial_notification=format_sla_duration(sla.initial_notification_minutes),
            escalation=display(sla.escalation_minutes),
            executive_escalation=display(sla.executive_escalation_minutes),
            requires_manual_escalation=sla.requires_manual_escalation,
            description=sla.description,
        )


class EscalationRulesResponse(BaseModel):
    rules: List[EscalationRuleInfo]
    defaults: List[SlaDefaultInfo]


class EscalationEventInfo(BaseModel):
    id: str
    notification_id: str
    escalation_rule_id: str
    original_recipient_id: str
    escalated_to_role: str
    escalated_at: datetime
    status: str
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_entity(cls, event: EscalationEvent) -> "EscalationEventInfo":
        return cls(
            id=str(event.id),
            notification_id=str(event.notification_id),
            escalation_rule_id=str(event.escalation_rule_id),
            original_recipient_id=str(event.original_recipient_id),
            escalated_to_role=event.escalated_to_role.value,
            escalated_at=event.escalated_at,
            status=event.status.value,
            resolved_at=event.resolved_at,
            resolved_by=str(event.resolved_by) if event.resolved_by else None,
            notes=event.notes,
        )


class EscalationCheckResponse(BaseModel):
    checked: int
    escalated: List[EscalationEventInfo]

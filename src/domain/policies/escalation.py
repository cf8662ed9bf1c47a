"""
Escalation SLA Policy

Default SLAs per (notification type, priority) and the rule evaluation that
decides when an unresolved notification escalates. Acknowledgment does not
stop escalation; only resolution does.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional, Tuple

from src.domain.entities import (
    EscalationEvent,
    EscalationRule,
    EscalationStatus,
    Notification,
    NotificationPriority,
    NotificationType,
    PlatformRole,
)


@dataclass(frozen=True)
class SlaDefinition:
    notification_type: NotificationType
    priority: NotificationPriority
    initial_notification_minutes: int
    escalation_minutes: Optional[int]
    executive_escalation_minutes: Optional[int]
    escalation_target_role: PlatformRole
    requires_manual_escalation: bool
    description: str


def _sla(
    notification_type,
    priority,
    initial,
    escalation,
    executive,
    manual,
    description,
) -> SlaDefinition:
    return SlaDefinition(
        notification_type=notification_type,
        priority=priority,
        initial_notification_minutes=initial,
        escalation_minutes=escalation,
        executive_escalation_minutes=executive,
        escalation_target_role=PlatformRole.platform_admin,
        requires_manual_escalation=manual,
        description=description,
    )


DEFAULT_SLAS: Tuple[SlaDefinition, ...] = (
    _sla(
        NotificationType.authority_change_proposal,
        NotificationPriority.high,
        0, 1440, 2880, False,
        "Authority changes require timely review to maintain governance integrity.",
    ),
    _sla(
        NotificationType.membership_change,
        NotificationPriority.high,
        0, None, 0, True,
        "Membership changes affecting authority are reviewed immediately.",
    ),
    _sla(
        NotificationType.licensing_request,
        NotificationPriority.normal,
        0, 2880, 4320, False,
        "Licensing requests are processed within standard business timelines.",
    ),
    _sla(
        NotificationType.approval_timeout,
        NotificationPriority.high,
        1440, 4320, None, False,
        "Pending approvals are escalated when decisions stall.",
    ),
    _sla(
        NotificationType.payment_failure,
        NotificationPriority.critical,
        0, 1440, 4320, False,
        "Payment failures affect service continuity and are addressed promptly.",
    ),
    _sla(
        NotificationType.refund_initiated,
        NotificationPriority.high,
        0, None, 0, True,
        "Refunds require immediate executive visibility for financial oversight.",
    ),
    _sla(
        NotificationType.security_event,
        NotificationPriority.critical,
        0, 0, 0, False,
        "Security events require immediate attention and executive awareness.",
    ),
    _sla(
        NotificationType.export_completed,
        NotificationPriority.normal,
        0, None, None, True,
        "Export completion is informational. No escalation required.",
    ),
)

SLA_INDEX: Dict[Tuple[NotificationType, NotificationPriority], SlaDefinition] = {
    (sla.notification_type, sla.priority): sla for sla in DEFAULT_SLAS
}


def get_sla(
    notification_type: NotificationType, priority: NotificationPriority
) -> Optional[SlaDefinition]:
    return SLA_INDEX.get((NotificationType(notification_type), NotificationPriority(priority)))


def format_sla_duration(minutes: Optional[int]) -> str:
    if not minutes:
        return "Immediate"
    if minutes < 60:
        return f"{minutes} minutes"
    if minutes < 1440:
        hours = minutes // 60
        return f"{hours} hour{'s' if hours > 1 else ''}"
    days = minutes // 1440
    return f"{days} day{'s' if days > 1 else ''}"


_CATEGORIES = {
    NotificationType.authority_change_proposal: "Authority & Governance",
    NotificationType.membership_change: "Authority & Governance",
    NotificationType.licensing_request: "Licensing Operations",
    NotificationType.approval_timeout: "Licensing Operations",
    NotificationType.payment_failure: "Billing & Payments",
    NotificationType.refund_initiated: "Billing & Payments",
    NotificationType.security_event: "Security & System",
}


def sla_category(notification_type: NotificationType) -> str:
    return _CATEGORIES.get(NotificationType(notification_type), "Operational")


def default_rule(sla: SlaDefinition) -> Optional[EscalationRule]:
    """Global rule seeded from a default SLA; None when it never auto-escalates."""
    if sla.escalation_minutes is None:
        return None
    return EscalationRule(
        notification_type=sla.notification_type,
        priority=sla.priority,
        sla_minutes=sla.escalation_minutes,
        escalation_target_role=sla.escalation_target_role,
        tenant_id=None,
        is_active=True,
    )


def rule_applies(rule: EscalationRule, notification: Notification) -> bool:
    if not rule.is_active:
        return False
    if rule.notification_type != notification.notification_type:
        return False
    if rule.priority != notification.priority:
        return False
    return rule.tenant_id is None or rule.tenant_id == notification.tenant_id


def select_rule(
    rules: Iterable[EscalationRule], notification: Notification
) -> Optional[EscalationRule]:
    """Tenant-specific rule wins over a global one."""
    matching = [r for r in rules if rule_applies(r, notification)]
    if not matching:
        return None
    matching.sort(key=lambda r: r.tenant_id is None)
    return matching[0]


def escalation_due_at(notification: Notification, rule: EscalationRule) -> datetime:
    return notification.created_at + timedelta(minutes=rule.sla_minutes)


def evaluate_escalation(
    notification: Notification,
    rule: Optional[EscalationRule],
    existing_events: Iterable[EscalationEvent],
    now: datetime,
) -> Optional[EscalationEvent]:
    """
    Build the escalation event for a notification if its SLA has lapsed.

    ``escalated_at`` is the SLA deadline itself, not the evaluation time, so
    a zero-minute SLA escalates at creation time.
    """
    if rule is None or not rule_applies(rule, notification):
        return None
    if notification.resolved_at is not None:
        return None
    if any(event.notification_id == notification.id for event in existing_events):
        return None

    due_at = escalation_due_at(notification, rule)
    if due_at > now:
        return None

    return EscalationEvent(
        notification_id=notification.id,
        escalation_rule_id=rule.id,
        original_recipient_id=notification.recipient_id,
        escalated_to_role=rule.escalation_target_role,
        escalated_at=due_at,
        status=EscalationStatus.escalated,
    )

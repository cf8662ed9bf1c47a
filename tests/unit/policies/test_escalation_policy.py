from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from src.domain.entities import (
    EscalationEvent,
    EscalationRule,
    EscalationStatus,
    Notification,
    NotificationPriority,
    NotificationType,
    PlatformRole,
)
from src.domain.policies.escalation import (
    DEFAULT_SLAS,
    default_rule,
    evaluate_escalation,
    format_sla_duration,
    get_sla,
    select_rule,
    sla_category,
)

CREATED = datetime(2026, 5, 1, 8, 0, 0)


def notification(notification_type, priority, tenant_id=None) -> Notification:
    return Notification(
        id=uuid4(),
        recipient_id=uuid4(),
        tenant_id=tenant_id,
        notification_type=notification_type,
        priority=priority,
        title="Review required",
        message="Please review",
        created_at=CREATED,
    )


def rule(notification_type, priority, sla_minutes, tenant_id=None, is_active=True) -> EscalationRule:
    return EscalationRule(
        id=uuid4(),
        notification_type=notification_type,
        priority=priority,
        sla_minutes=sla_minutes,
        tenant_id=tenant_id,
        is_active=is_active,
    )


def test_default_sla_table():
    assert len(DEFAULT_SLAS) == 8
    sla = get_sla(NotificationType.payment_failure, NotificationPriority.critical)
    assert sla.escalation_minutes == 1440
    assert sla.executive_escalation_minutes == 4320
    assert get_sla(NotificationType.payment_failure, NotificationPriority.low) is None


def test_manual_slas_have_no_default_rule():
    refund = get_sla(NotificationType.refund_initiated, NotificationPriority.high)
    security = get_sla(NotificationType.security_event, NotificationPriority.critical)

    assert default_rule(refund) is None
    seeded = default_rule(security)
    assert seeded.sla_minutes == 0
    assert seeded.tenant_id is None
    assert seeded.escalation_target_role == PlatformRole.platform_admin


@pytest.mark.parametrize(
    "minutes,expected",
    [
        (None, "Immediate"),
        (0, "Immediate"),
        (45, "45 minutes"),
        (60, "1 hour"),
        (180, "3 hours"),
        (1440, "1 day"),
        (4320, "3 days"),
    ],
)
def test_format_sla_duration(minutes, expected):
    assert format_sla_duration(minutes) == expected


def test_sla_category():
    assert sla_category(NotificationType.refund_initiated) == "Billing & Payments"
    assert sla_category(NotificationType.export_completed) == "Operational"


def test_zero_minute_sla_escalates_at_creation():
    n = notification(NotificationType.security_event, NotificationPriority.critical)
    r = rule(NotificationType.security_event, NotificationPriority.critical, 0)

    event = evaluate_escalation(n, r, [], now=CREATED)

    assert event.escalated_at == CREATED
    assert event.notification_id == n.id
    assert event.escalation_rule_id == r.id
    assert event.original_recipient_id == n.recipient_id
    assert event.status == EscalationStatus.escalated


def test_not_due_before_sla():
    n = notification(NotificationType.licensing_request, NotificationPriority.normal)
    r = rule(NotificationType.licensing_request, NotificationPriority.normal, 2880)

    assert evaluate_escalation(n, r, [], now=CREATED + timedelta(days=1)) is None

    event = evaluate_escalation(n, r, [], now=CREATED + timedelta(days=3))
    assert event.escalated_at == CREATED + timedelta(minutes=2880)


def test_acknowledged_notifications_still_escalate():
    n = notification(NotificationType.payment_failure, NotificationPriority.critical)
    n.acknowledged_at = CREATED + timedelta(minutes=5)
    r = rule(NotificationType.payment_failure, NotificationPriority.critical, 60)

    assert evaluate_escalation(n, r, [], now=CREATED + timedelta(hours=2)) is not None


def test_resolved_or_already_escalated_notifications_are_skipped():
    n = notification(NotificationType.payment_failure, NotificationPriority.critical)
    r = rule(NotificationType.payment_failure, NotificationPriority.critical, 60)
    later = CREATED + timedelta(hours=2)
    existing = EscalationEvent(
        notification_id=n.id,
        escalation_rule_id=r.id,
        original_recipient_id=n.recipient_id,
        escalated_to_role=PlatformRole.platform_admin,
    )

    assert evaluate_escalation(n, r, [existing], now=later) is None

    n.resolved_at = CREATED + timedelta(minutes=30)
    assert evaluate_escalation(n, r, [], now=later) is None


def test_inactive_or_mismatched_rules_never_fire():
    n = notification(NotificationType.payment_failure, NotificationPriority.critical)
    later = CREATED + timedelta(days=5)

    inactive = rule(NotificationType.payment_failure, NotificationPriority.critical, 0, is_active=False)
    other_priority = rule(NotificationType.payment_failure, NotificationPriority.high, 0)

    assert evaluate_escalation(n, inactive, [], now=later) is None
    assert evaluate_escalation(n, other_priority, [], now=later) is None
    assert evaluate_escalation(n, None, [], now=later) is None


def test_tenant_rule_wins_over_global():
    tenant_id = uuid4()
    n = notification(NotificationType.licensing_request, NotificationPriority.normal, tenant_id)
    global_rule = rule(NotificationType.licensing_request, NotificationPriority.normal, 2880)
    tenant_rule = rule(NotificationType.licensing_request, NotificationPriority.normal, 60, tenant_id)
    other_tenant = rule(NotificationType.licensing_request, NotificationPriority.normal, 1, uuid4())

    assert select_rule([global_rule, other_tenant, tenant_rule], n) is tenant_rule
    assert select_rule([global_rule, other_tenant], n) is global_rule
    assert select_rule([other_tenant], n) is None

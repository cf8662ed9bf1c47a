from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from src.app.use_cases.escalations import (
    CheckEscalationsUseCase,
    ListEscalationRulesUseCase,
    ResolveEscalationUseCase,
    SeedEscalationRulesUseCase,
    UpsertEscalationRuleUseCase,
)
from src.domain.entities import (
    EscalationEvent,
    EscalationRule,
    EscalationStatus,
    Notification,
    NotificationPriority,
    NotificationType,
    PlatformRole,
)

NOW = datetime(2026, 5, 3, 8, 0, 0)


def notification(notification_type, priority, age: timedelta) -> Notification:
    return Notification(
        id=uuid4(),
        recipient_id=uuid4(),
        notification_type=notification_type,
        priority=priority,
        title="Needs attention",
        message="Needs attention",
        created_at=NOW - age,
    )


def rule(notification_type, priority, sla_minutes, tenant_id=None) -> EscalationRule:
    return EscalationRule(
        id=uuid4(),
        notification_type=notification_type,
        priority=priority,
        sla_minutes=sla_minutes,
        tenant_id=tenant_id,
    )


@pytest.fixture(autouse=True)
def passthrough_writes(mock_uow):
    mock_uow.escalation_events.create.side_effect = lambda e: e
    mock_uow.escalation_events.update.side_effect = lambda e: e
    mock_uow.escalation_rules.save.side_effect = lambda r: r


@pytest.mark.asyncio
async def test_check_escalates_lapsed_notifications_once(mock_uow):
    security = notification(NotificationType.security_event, NotificationPriority.critical, timedelta(0))
    licensing = notification(NotificationType.licensing_request, NotificationPriority.normal, timedelta(days=1))
    payment = notification(NotificationType.payment_failure, NotificationPriority.critical, timedelta(days=2))
    security_rule = rule(NotificationType.security_event, NotificationPriority.critical, 0)
    mock_uow.notifications.list_unresolved.return_value = [security, licensing, payment]
    mock_uow.escalation_rules.list_active.return_value = [
        security_rule,
        rule(NotificationType.licensing_request, NotificationPriority.normal, 2880),
        rule(NotificationType.payment_failure, NotificationPriority.critical, 1440),
    ]
    mock_uow.escalation_events.get_by_notification_ids.return_value = [
        EscalationEvent(
            notification_id=payment.id,
            escalation_rule_id=uuid4(),
            original_recipient_id=payment.recipient_id,
            escalated_to_role=PlatformRole.platform_admin,
        )
    ]

    result = await CheckEscalationsUseCase(mock_uow).execute(now=NOW)

    assert result.value.checked == 3
    escalated = result.value.escalated
    assert [e.notification_id for e in escalated] == [str(security.id)]
    assert escalated[0].escalated_at == security.created_at
    assert escalated[0].escalation_rule_id == str(security_rule.id)
    assert escalated[0].status == "escalated"
    assert mock_uow.audit_events.create.await_args.args[0].action == "escalation_triggered"
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_list_rules_includes_sla_defaults(mock_uow):
    mock_uow.escalation_rules.list_all.return_value = [
        rule(NotificationType.payment_failure, NotificationPriority.critical, 1440)
    ]

    result = await ListEscalationRulesUseCase(mock_uow).execute()

    assert result.value.rules[0].sla_display == "1 day"
    assert len(result.value.defaults) == 8
    refund = next(d for d in result.value.defaults if d.notification_type == "refund_initiated")
    assert refund.escalation is None
    assert refund.executive_escalation == "Immediate"
    assert refund.requires_manual_escalation is True


@pytest.mark.asyncio
async def test_upsert_updates_existing_scope(mock_uow):
    existing = rule(NotificationType.licensing_request, NotificationPriority.normal, 2880)
    mock_uow.escalation_rules.get_by_scope.return_value = existing
    actor_id = uuid4()

    result = await UpsertEscalationRuleUseCase(mock_uow).execute(
        actor_id, NotificationType.licensing_request, NotificationPriority.normal, 60, is_active=False
    )

    assert result.value.id == str(existing.id)
    assert existing.sla_minutes == 60
    assert existing.is_active is False
    assert mock_uow.audit_events.create.await_args.args[0].action == "escalation_rule_saved"


@pytest.mark.asyncio
async def test_upsert_rejects_negative_sla(mock_uow):
    result = await UpsertEscalationRuleUseCase(mock_uow).execute(
        uuid4(), NotificationType.licensing_request, NotificationPriority.normal, -1
    )

    assert result.error.code == "INVALID_SLA"
    mock_uow.escalation_rules.save.assert_not_awaited()


@pytest.mark.asyncio
async def test_seed_skips_manual_and_existing_rules(mock_uow):
    existing = rule(NotificationType.payment_failure, NotificationPriority.critical, 30)

    async def by_scope(notification_type, priority, tenant_id):
        if notification_type == NotificationType.payment_failure:
            return existing
        return None

    mock_uow.escalation_rules.get_by_scope.side_effect = by_scope
    mock_uow.escalation_rules.list_all.return_value = []

    await SeedEscalationRulesUseCase(mock_uow).execute()

    seeded = {call.args[0].notification_type for call in mock_uow.escalation_rules.save.await_args_list}
    assert seeded == {
        NotificationType.authority_change_proposal,
        NotificationType.licensing_request,
        NotificationType.approval_timeout,
        NotificationType.security_event,
    }


@pytest.mark.asyncio
async def test_resolve_escalation(mock_uow):
    event = EscalationEvent(
        id=uuid4(),
        notification_id=uuid4(),
        escalation_rule_id=uuid4(),
        original_recipient_id=uuid4(),
        escalated_to_role=PlatformRole.platform_admin,
    )
    mock_uow.escalation_events.get_by_id.return_value = event
    actor_id = uuid4()

    result = await ResolveEscalationUseCase(mock_uow).execute(actor_id, event.id, notes="handled")

    assert result.value.status == "resolved"
    assert result.value.resolved_by == str(actor_id)

    again = await ResolveEscalationUseCase(mock_uow).execute(actor_id, event.id)
    assert again.error.code == "ALREADY_RESOLVED"
    assert event.status == EscalationStatus.resolved


@pytest.mark.asyncio
async def test_resolve_missing_escalation(mock_uow):
    mock_uow.escalation_events.get_by_id.return_value = None

    result = await ResolveEscalationUseCase(mock_uow).execute(uuid4(), uuid4())

    assert result.error.code == "ESCALATION_NOT_FOUND"

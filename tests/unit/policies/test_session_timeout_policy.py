from datetime import datetime, timedelta

import pytest

from config import ApplicationConfig
from src.domain.policies import (
    LogoutReason,
    SessionPolicy,
    SessionState,
    SessionTimeoutMachine,
)
from src.domain.policies.session_timeout import SessionAuditEvents

T0 = datetime(2026, 3, 2, 9, 0, 0)


def minutes(n: float) -> timedelta:
    return timedelta(minutes=n)


@pytest.fixture
def machine():
    return SessionTimeoutMachine(SessionPolicy(), started_at=T0)


def test_policy_defaults_and_label():
    policy = SessionPolicy()

    assert policy.idle_timeout == minutes(30)
    assert policy.warning_countdown == minutes(2)
    assert policy.absolute_lifetime == timedelta(hours=8)
    assert policy.label == "standard-8h-30m"
    assert SessionPolicy.from_config(ApplicationConfig) == policy


def test_warning_at_idle_timeout_and_expiry_after_countdown(machine):
    assert machine.evaluate(T0 + minutes(29) + timedelta(seconds=59)) is None
    assert machine.state == SessionState.active

    warning = machine.evaluate(T0 + minutes(30))
    assert warning.previous == SessionState.active
    assert warning.current == SessionState.idle_warning

    assert machine.evaluate(T0 + minutes(31)) is None
    assert machine.seconds_remaining(T0 + minutes(31)) == 60

    expired = machine.evaluate(T0 + minutes(32))
    assert expired.current == SessionState.expired
    assert expired.reason == LogoutReason.idle
    assert machine.is_expired


def test_activity_before_idle_timeout_restarts_the_clock(machine):
    assert machine.record_activity(T0 + minutes(29))

    assert machine.evaluate(T0 + minutes(58)) is None
    assert machine.state == SessionState.active
    assert machine.evaluate(T0 + minutes(59)).current == SessionState.idle_warning


def test_activity_during_warning_returns_to_active(machine):
    machine.evaluate(T0 + minutes(30))

    assert machine.record_activity(T0 + minutes(31))
    assert machine.state == SessionState.active
    assert machine.seconds_remaining(T0 + minutes(31)) == 0


def test_extend_from_warning(machine):
    machine.evaluate(T0 + minutes(30) + timedelta(seconds=1))

    assert machine.extend(T0 + minutes(30) + timedelta(seconds=2))
    assert machine.state == SessionState.active


def test_continuous_activity_still_hits_absolute_lifetime(machine):
    now = T0
    while now < T0 + timedelta(hours=8):
        assert machine.record_activity(now) or now == T0
        now += minutes(10)

    transition = machine.evaluate(T0 + timedelta(hours=8))

    assert transition.current == SessionState.expired
    assert transition.reason == LogoutReason.max_session


def test_late_activity_after_deadline_does_not_revive(machine):
    assert machine.record_activity(T0 + minutes(45)) is False
    assert machine.is_expired
    assert machine.expiry_reason == LogoutReason.idle


def test_activity_is_throttled(machine):
    machine.record_activity(T0 + minutes(5))

    assert machine.record_activity(T0 + minutes(5) + timedelta(seconds=2)) is False
    assert machine.last_activity_at == T0 + minutes(5)
    assert machine.record_activity(T0 + minutes(5) + timedelta(seconds=6))
    assert machine.record_activity(T0 + minutes(5) + timedelta(seconds=7), throttle=False)


def test_grace_period_suppresses_expiry():
    policy = SessionPolicy(
        idle_timeout=timedelta(seconds=10),
        warning_countdown=timedelta(seconds=5),
        grace_period=timedelta(seconds=60),
    )
    machine = SessionTimeoutMachine(policy, started_at=T0)

    assert machine.evaluate(T0 + timedelta(seconds=30)) is None
    assert machine.state == SessionState.active

    transition = machine.evaluate(T0 + timedelta(seconds=61))
    assert transition.current == SessionState.expired
    assert transition.reason == LogoutReason.idle


def test_expired_is_terminal(machine):
    transition = machine.expire(LogoutReason.manual, T0 + minutes(3))

    assert transition.reason == LogoutReason.manual
    assert machine.expire(LogoutReason.idle, T0 + minutes(4)) is None
    assert machine.evaluate(T0 + timedelta(hours=9)) is None
    assert machine.record_activity(T0 + minutes(5)) is False
    assert machine.expiry_reason == LogoutReason.manual


def test_next_deadline(machine):
    assert machine.next_deadline(T0) == T0 + timedelta(seconds=60)
    assert machine.next_deadline(T0 + minutes(5)) == T0 + minutes(30)

    machine.evaluate(T0 + minutes(30))
    assert machine.next_deadline(T0 + minutes(30)) == T0 + minutes(32)

    machine.expire(LogoutReason.manual, T0 + minutes(31))
    assert machine.next_deadline(T0 + minutes(31)) is None


def test_next_deadline_capped_by_absolute_lifetime():
    machine = SessionTimeoutMachine(
        SessionPolicy(), started_at=T0, last_activity_at=T0 + timedelta(hours=7, minutes=50)
    )

    assert machine.next_deadline(T0 + timedelta(hours=7, minutes=51)) == T0 + timedelta(hours=8)


def test_audit_event_per_logout_reason():
    assert SessionAuditEvents.for_reason(LogoutReason.idle) == "auth.session_signed_out_idle"
    assert (
        SessionAuditEvents.for_reason(LogoutReason.max_session)
        == "auth.session_signed_out_max_duration"
    )
    assert SessionAuditEvents.for_reason(LogoutReason.manual) == "auth.session_signed_out_manual"

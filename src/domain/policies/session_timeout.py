"""
Session Timeout Policy

Uniform inactivity and absolute-lifetime policy for every authenticated
surface, independent of role or tenant.

    active --(idle_timeout without activity)--> idle-warning
    idle-warning --(warning_countdown without activity)--> expired
    any --(absolute_lifetime since session start)--> expired
    active | idle-warning --(activity)--> active

``expired`` is terminal. The machine is driven by explicit timestamps so it
can be evaluated without timers; the async controller in
``src.app.services.session_timeout`` schedules the evaluations.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


class SessionState(str, Enum):
    active = "active"
    idle_warning = "idle-warning"
    expired = "expired"


class LogoutReason(str, Enum):
    idle = "idle"
    max_session = "max-session"
    manual = "manual"


class SessionAuditEvents:
    WARNING_SHOWN = "auth.session_idle_warning_shown"
    SIGNED_OUT_IDLE = "auth.session_signed_out_idle"
    SIGNED_OUT_ABSOLUTE = "auth.session_signed_out_max_duration"
    SIGNED_OUT_MANUAL = "auth.session_signed_out_manual"

    @classmethod
    def for_reason(cls, reason: LogoutReason) -> str:
        return {
            LogoutReason.idle: cls.SIGNED_OUT_IDLE,
            LogoutReason.max_session: cls.SIGNED_OUT_ABSOLUTE,
            LogoutReason.manual: cls.SIGNED_OUT_MANUAL,
        }[reason]


# Input kinds that count as user activity. Background polling, socket
# messages and visibility changes do not.
ACTIVITY_EVENTS = (
    "mousedown",
    "mousemove",
    "keypress",
    "keydown",
    "scroll",
    "touchstart",
    "click",
    "wheel",
)


@dataclass(frozen=True)
class SessionPolicy:
    idle_timeout: timedelta = timedelta(minutes=30)
    warning_countdown: timedelta = timedelta(minutes=2)
    absolute_lifetime: timedelta = timedelta(hours=8)
    activity_throttle: timedelta = timedelta(seconds=5)
    grace_period: timedelta = timedelta(seconds=60)

    @property
    def label(self) -> str:
        hours = int(self.absolute_lifetime.total_seconds() // 3600)
        minutes = int(self.idle_timeout.total_seconds() // 60)
        return f"standard-{hours}h-{minutes}m"

    @classmethod
    def from_config(cls, config) -> "SessionPolicy":
        return cls(
            idle_timeout=timedelta(minutes=config.IDLE_TIMEOUT_MINUTES),
            warning_countdown=timedelta(minutes=config.WARNING_COUNTDOWN_MINUTES),
            absolute_lifetime=timedelta(hours=config.ABSOLUTE_SESSION_HOURS),
            activity_throttle=timedelta(seconds=config.ACTIVITY_THROTTLE_SECONDS),
            grace_period=timedelta(seconds=config.AUTH_GRACE_PERIOD_SECONDS),
        )


@dataclass(frozen=True)
class Transition:
    previous: SessionState
    current: SessionState
    reason: Optional[LogoutReason] = None
    at: Optional[datetime] = None


class SessionTimeoutMachine:
    """Finite-state machine for one authenticated session."""

    def __init__(
        self,
        policy: SessionPolicy,
        started_at: datetime,
        last_activity_at: Optional[datetime] = None,
    ):
        self.policy = policy
        self.started_at = started_at
        self.last_activity_at = last_activity_at or started_at
        self.state = SessionState.active
        self.expiry_reason: Optional[LogoutReason] = None

    @property
    def is_expired(self) -> bool:
        return self.state == SessionState.expired

    def _move(self, state: SessionState, now: datetime, reason=None) -> Optional[Transition]:
        if state == self.state:
            return None
        transition = Transition(self.state, state, reason, now)
        self.state = state
        if state == SessionState.expired:
            self.expiry_reason = reason
        return transition

    def in_grace_period(self, now: datetime) -> bool:
        return now - self.started_at < self.policy.grace_period

    def absolute_deadline(self) -> datetime:
        return self.started_at + self.policy.absolute_lifetime

    def warning_deadline(self) -> datetime:
        return self.last_activity_at + self.policy.idle_timeout

    def idle_deadline(self) -> datetime:
        return self.warning_deadline() + self.policy.warning_countdown

    def evaluate(self, now: datetime) -> Optional[Transition]:
        """Apply elapsed time. Returns the transition taken, if any."""
        if self.is_expired or self.in_grace_period(now):
            return None

        if now >= self.absolute_deadline():
            return self._move(SessionState.expired, now, LogoutReason.max_session)
        if now >= self.idle_deadline():
            return self._move(SessionState.expired, now, LogoutReason.idle)
        if now >= self.warning_deadline():
            return self._move(SessionState.idle_warning, now)
        return self._move(SessionState.active, now)

    def record_activity(self, now: datetime, throttle: bool = True) -> bool:
        """
        Register user activity. Throttled activity is dropped.

        Resets the idle clock only; the absolute clock keeps running from
        ``started_at``. Returns True when the activity was processed.
        """
        if self.is_expired:
            return False
        # Time already spent past a deadline is not undone by late input
        self.evaluate(now)
        if self.is_expired:
            return False
        if throttle and now - self.last_activity_at < self.policy.activity_throttle:
            return False
        self.last_activity_at = max(self.last_activity_at, now)
        self._move(SessionState.active, now)
        return True

    def extend(self, now: datetime) -> bool:
        """'Stay signed in' from the warning prompt: unthrottled activity."""
        return self.record_activity(now, throttle=False)

    def expire(self, reason: LogoutReason, now: datetime) -> Optional[Transition]:
        if self.is_expired:
            return None
        return self._move(SessionState.expired, now, reason)

    def next_deadline(self, now: datetime) -> Optional[datetime]:
        """When the next evaluation could change state."""
        if self.is_expired:
            return None
        grace_end = self.started_at + self.policy.grace_period
        if now < grace_end:
            return grace_end
        if self.state == SessionState.idle_warning:
            candidate = self.idle_deadline()
        else:
            candidate = self.warning_deadline()
        return min(candidate, self.absolute_deadline())

    def seconds_remaining(self, now: datetime) -> int:
        """Countdown shown while in idle-warning; 0 otherwise."""
        if self.state != SessionState.idle_warning:
            return 0
        deadline = min(self.idle_deadline(), self.absolute_deadline())
        return max(0, int((deadline - now).total_seconds()))

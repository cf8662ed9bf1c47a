"""
Session Timeout Controller

Drives a SessionTimeoutMachine with asyncio timers for one client context,
shares activity and logout with sibling contexts, and runs the expiry
procedure exactly once per session.
"""

import asyncio
import inspect
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Set
from urllib.parse import urlencode

from config import ApplicationConfig
from src.app.services.audit_logger import AuditLogger, ResourceTypes
from src.app.services.local_store import ILocalStore
from src.app.services.session_store import SessionStore
from src.app.services.session_sync import SessionSyncChannel, SyncMessage, SyncMessageType
from src.domain.base import utcnow
from src.domain.policies.session_timeout import (
    LogoutReason,
    SessionAuditEvents,
    SessionPolicy,
    SessionState,
    SessionTimeoutMachine,
    Transition,
)

logger = logging.getLogger(__name__)


def sign_in_destination(reason: LogoutReason, sign_in_path: str = ApplicationConfig.SIGN_IN_PATH) -> str:
    return f"{sign_in_path}?{urlencode({'reason': reason.value})}"


class SessionTimeoutController:
    def __init__(
        self,
        policy: SessionPolicy,
        session_store: SessionStore,
        local_store: ILocalStore,
        on_signed_out: Callable[[LogoutReason], Any],
        sync: Optional[SessionSyncChannel] = None,
        audit_logger: Optional[AuditLogger] = None,
        on_warning: Optional[Callable[[int], Any]] = None,
        clock: Callable[[], datetime] = utcnow,
        start_key: str = ApplicationConfig.SESSION_START_KEY,
        activity_key: str = ApplicationConfig.SESSION_ACTIVITY_KEY,
    ):
        self.policy = policy
        self.session_store = session_store
        self.local_store = local_store
        self.on_signed_out = on_signed_out
        self.sync = sync
        self.audit_logger = audit_logger
        self.on_warning = on_warning
        self.clock = clock
        self.start_key = start_key
        self.activity_key = activity_key

        self.machine: Optional[SessionTimeoutMachine] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._unsubscribe_sync: Optional[Callable[[], None]] = None
        self._expiry_handled = False

    @property
    def state(self) -> Optional[SessionState]:
        return self.machine.state if self.machine is not None else None

    def seconds_remaining(self) -> int:
        if self.machine is None:
            return 0
        return self.machine.seconds_remaining(self.clock())

    def _read_timestamp(self, key: str) -> Optional[datetime]:
        raw = self.local_store.get(key)
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    async def start(self) -> None:
        """
        Begin tracking. A session start already recorded by a sibling context
        is reused so every context shares one absolute deadline.
        """
        now = self.clock()
        started_at = self._read_timestamp(self.start_key)
        if started_at is None or started_at > now:
            started_at = now
            self.local_store.set(self.start_key, started_at.isoformat())

        last_activity = self._read_timestamp(self.activity_key)
        if last_activity is not None and not started_at <= last_activity <= now:
            last_activity = None

        self.machine = SessionTimeoutMachine(self.policy, started_at, last_activity)
        self._expiry_handled = False
        if self.sync is not None:
            self._unsubscribe_sync = self.sync.listen(self._on_sync_message)
        await self.tick()

    def stop(self) -> None:
        self._cancel_timer()
        if self._unsubscribe_sync is not None:
            self._unsubscribe_sync()
            self._unsubscribe_sync = None
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def record_activity(self) -> bool:
        """User input in this context. Throttled by the policy."""
        if self.machine is None:
            return False
        now = self.clock()
        if not self.machine.record_activity(now):
            self._after_evaluation_outside_tick()
            return False
        self.local_store.set(self.activity_key, now.isoformat())
        if self.sync is not None:
            self.sync.publish(SyncMessageType.activity, timestamp=now)
        self._schedule()
        return True

    async def extend(self) -> bool:
        """'Stay signed in' from the idle warning."""
        if self.machine is None:
            return False
        now = self.clock()
        if not self.machine.extend(now):
            await self._handle_expiry_if_needed()
            return False
        self.local_store.set(self.activity_key, now.isoformat())
        if self.sync is not None:
            self.sync.publish(SyncMessageType.extend_session, timestamp=now)
        self._schedule()
        return True

    async def sign_out(self) -> None:
        """Manual sign-out. Works whether or not tracking was started."""
        if self.machine is not None:
            self.machine.expire(LogoutReason.manual, self.clock())
        await self._expire(LogoutReason.manual)

    async def tick(self) -> Optional[Transition]:
        """Evaluate elapsed time and act on the resulting transition."""
        if self.machine is None:
            return None
        transition = self.machine.evaluate(self.clock())
        await self._handle(transition)
        if not self.machine.is_expired:
            self._schedule()
        return transition

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def _handle(self, transition: Optional[Transition]) -> None:
        if transition is None:
            return
        if transition.current == SessionState.idle_warning:
            await self._warning_shown()
        elif transition.current == SessionState.expired:
            await self._expire(transition.reason)

    async def _handle_expiry_if_needed(self) -> None:
        if self.machine is not None and self.machine.is_expired:
            await self._expire(self.machine.expiry_reason or LogoutReason.idle)

    def _after_evaluation_outside_tick(self) -> None:
        # Activity can land after a deadline the timer has not fired for yet
        if self.machine.is_expired and not self._expiry_handled:
            self._spawn(self._expire(self.machine.expiry_reason or LogoutReason.idle))

    async def _warning_shown(self) -> None:
        if self.audit_logger is not None:
            await self.audit_logger.emit(
                SessionAuditEvents.WARNING_SHOWN,
                ResourceTypes.SESSION,
                actor_id=self.session_store.user_id,
                details={"policy": self.policy.label},
            )
        if self.on_warning is not None:
            await self._call(self.on_warning, self.seconds_remaining())

    async def _expire(self, reason: LogoutReason, broadcast: bool = True) -> None:
        if self._expiry_handled:
            return
        self._expiry_handled = True
        self._cancel_timer()
        logger.info("Session signed out (%s)", reason.value)

        if self.audit_logger is not None:
            await self.audit_logger.emit(
                SessionAuditEvents.for_reason(reason),
                ResourceTypes.SESSION,
                actor_id=self.session_store.user_id,
                details={"reason": reason.value, "policy": self.policy.label},
            )
        if broadcast and self.sync is not None:
            self.sync.publish(SyncMessageType.logout, reason=reason.value)

        self.local_store.remove(self.start_key)
        self.local_store.remove(self.activity_key)
        await self.session_store.sign_out()
        await self._call(self.on_signed_out, reason)

    def _on_sync_message(self, message: SyncMessage) -> None:
        if self.machine is None or self.machine.is_expired:
            return
        if message.type == SyncMessageType.logout:
            try:
                reason = LogoutReason(message.reason)
            except ValueError:
                reason = LogoutReason.manual
            self.machine.expire(reason, self.clock())
            self._spawn(self._expire(reason, broadcast=False))
            return

        # Remote activity and extend both reset the local idle clock
        timestamp = min(message.timestamp, self.clock())
        if self.machine.record_activity(timestamp, throttle=False):
            self._schedule()
        else:
            self._after_evaluation_outside_tick()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self) -> None:
        self._cancel_timer()
        if self.machine is None:
            return
        now = self.clock()
        deadline = self.machine.next_deadline(now)
        if deadline is None:
            return
        delay = max(0.0, (deadline - now).total_seconds())
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, lambda: self._spawn(self.tick()))

    def _spawn(self, coro) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @staticmethod
    async def _call(callback: Callable[..., Any], *args) -> None:
        result = callback(*args)
        if inspect.isawaitable(result):
            await result

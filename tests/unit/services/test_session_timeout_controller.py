import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from config import ApplicationConfig
from src.adapter.services.broadcast_channel import BroadcastHub
from src.app.services.session_sync import SessionSyncChannel
from src.app.services.session_timeout import SessionTimeoutController, sign_in_destination
from src.domain.policies import LogoutReason, SessionPolicy, SessionState

T0 = datetime(2026, 3, 2, 9, 0, 0)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(T0)


def session_store():
    store = MagicMock()
    store.user_id = uuid4()
    store.sign_out = AsyncMock()
    return store


def audit_logger():
    logger = MagicMock()
    logger.emit = AsyncMock(return_value=True)
    return logger


def controller(clock, local_store, sync=None, **kwargs):
    return SessionTimeoutController(
        SessionPolicy(),
        kwargs.pop("session_store", None) or session_store(),
        local_store,
        on_signed_out=kwargs.pop("on_signed_out", None) or MagicMock(),
        sync=sync,
        audit_logger=kwargs.pop("audit_logger", None) or audit_logger(),
        clock=clock,
        **kwargs,
    )


async def settle():
    for _ in range(10):
        await asyncio.sleep(0)


def test_sign_in_destination():
    assert sign_in_destination(LogoutReason.idle) == "/auth/sign-in?reason=idle"
    assert sign_in_destination(LogoutReason.max_session) == "/auth/sign-in?reason=max-session"


@pytest.mark.asyncio
async def test_idle_warning_then_sign_out_runs_once(clock, local_store):
    on_signed_out = MagicMock()
    on_warning = MagicMock()
    audit = audit_logger()
    store = session_store()
    c = controller(
        clock,
        local_store,
        session_store=store,
        on_signed_out=on_signed_out,
        audit_logger=audit,
        on_warning=on_warning,
    )
    await c.start()
    assert local_store.get(ApplicationConfig.SESSION_START_KEY) == T0.isoformat()

    clock.advance(minutes=30)
    await c.tick()
    assert c.state == SessionState.idle_warning
    on_warning.assert_called_once_with(120)
    assert audit.emit.await_args.args[0] == "auth.session_idle_warning_shown"

    clock.advance(minutes=2)
    await c.tick()
    await c.tick()
    await c.sign_out()

    assert c.state == SessionState.expired
    on_signed_out.assert_called_once_with(LogoutReason.idle)
    store.sign_out.assert_awaited_once()
    actions = [call.args[0] for call in audit.emit.await_args_list]
    assert actions == ["auth.session_idle_warning_shown", "auth.session_signed_out_idle"]
    assert audit.emit.await_args.kwargs["details"] == {
        "reason": "idle",
        "policy": "standard-8h-30m",
    }
    assert local_store.get(ApplicationConfig.SESSION_START_KEY) is None
    c.stop()


@pytest.mark.asyncio
async def test_activity_keeps_session_alive(clock, local_store):
    c = controller(clock, local_store)
    await c.start()

    clock.advance(minutes=29)
    assert c.record_activity()
    clock.advance(minutes=29)
    await c.tick()

    assert c.state == SessionState.active
    c.stop()


@pytest.mark.asyncio
async def test_absolute_lifetime_under_continuous_activity(clock, local_store):
    on_signed_out = MagicMock()
    c = controller(clock, local_store, on_signed_out=on_signed_out)
    await c.start()

    for _ in range(47):
        clock.advance(minutes=10)
        assert c.record_activity()
    clock.advance(minutes=10)
    await c.tick()

    on_signed_out.assert_called_once_with(LogoutReason.max_session)
    c.stop()


@pytest.mark.asyncio
async def test_manual_sign_out(clock, local_store):
    on_signed_out = AsyncMock()
    audit = audit_logger()
    c = controller(clock, local_store, on_signed_out=on_signed_out, audit_logger=audit)
    await c.start()

    await c.sign_out()

    on_signed_out.assert_awaited_once_with(LogoutReason.manual)
    assert audit.emit.await_args.args[0] == "auth.session_signed_out_manual"
    assert c.record_activity() is False
    assert await c.extend() is False


@pytest.mark.asyncio
async def test_manual_sign_out_before_start(clock, local_store):
    on_signed_out = MagicMock()
    store = session_store()
    c = controller(clock, local_store, on_signed_out=on_signed_out, session_store=store)

    await c.sign_out()
    await c.sign_out()

    store.sign_out.assert_awaited_once()
    on_signed_out.assert_called_once_with(LogoutReason.manual)
    assert c.state is None


@pytest.mark.asyncio
async def test_extend_from_warning(clock, local_store):
    c = controller(clock, local_store)
    await c.start()
    clock.advance(minutes=31)
    await c.tick()
    assert c.seconds_remaining() == 60

    assert await c.extend()

    assert c.state == SessionState.active
    assert local_store.get(ApplicationConfig.SESSION_ACTIVITY_KEY) == clock().isoformat()
    c.stop()


@pytest.mark.asyncio
async def test_sibling_context_shares_start_and_activity(clock, local_store):
    hub = BroadcastHub()
    first = controller(
        clock, local_store, sync=SessionSyncChannel(local_store, "sync", hub.open("sync"))
    )
    second = controller(
        clock, local_store, sync=SessionSyncChannel(local_store, "sync", hub.open("sync"))
    )
    await first.start()
    clock.advance(minutes=5)
    await second.start()
    assert second.machine.started_at == first.machine.started_at

    clock.advance(minutes=24)
    assert first.record_activity()
    clock.advance(minutes=2)
    await second.tick()

    assert second.state == SessionState.active
    first.stop()
    second.stop()


@pytest.mark.asyncio
async def test_logout_propagates_to_sibling_context(clock, local_store):
    hub = BroadcastHub()
    second_signed_out = MagicMock()
    second_store = session_store()
    first = controller(
        clock, local_store, sync=SessionSyncChannel(local_store, "sync", hub.open("sync"))
    )
    second = controller(
        clock,
        local_store,
        sync=SessionSyncChannel(local_store, "sync", hub.open("sync")),
        on_signed_out=second_signed_out,
        session_store=second_store,
    )
    await first.start()
    await second.start()

    await first.sign_out()
    await settle()

    second_signed_out.assert_called_once_with(LogoutReason.manual)
    second_store.sign_out.assert_awaited_once()
    assert second.state == SessionState.expired
    first.stop()
    second.stop()


@pytest.mark.asyncio
async def test_sync_falls_back_to_local_store(clock, local_store):
    second_signed_out = MagicMock()
    first = controller(clock, local_store, sync=SessionSyncChannel(local_store, "sync"))
    second = controller(
        clock,
        local_store,
        sync=SessionSyncChannel(local_store, "sync"),
        on_signed_out=second_signed_out,
    )
    await first.start()
    await second.start()
    clock.advance(minutes=3)

    await first.sign_out()
    await settle()

    second_signed_out.assert_called_once_with(LogoutReason.manual)
    first.stop()
    second.stop()

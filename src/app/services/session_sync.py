"""
Session Sync Channel

Keeps sibling client contexts (tabs) of one session in step: activity in
one resets idle timers everywhere, and a logout in one logs out all.

Messages go over a broadcast transport when one is available and always
through a key in the shared local store, so a failed broadcast still
reaches siblings. Malformed messages are ignored.
"""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.app.services.local_store import ILocalStore
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class SyncMessageType(str, Enum):
    activity = "activity"
    logout = "logout"
    extend_session = "extend-session"


class IBroadcastChannel(ABC):
    @abstractmethod
    def post_message(self, message: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def subscribe(self, listener: Callable[[Dict[str, Any]], None]) -> Callable[[], None]:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class SyncMessage:
    __slots__ = ("type", "timestamp", "source", "reason")

    def __init__(
        self,
        type: SyncMessageType,
        timestamp: datetime,
        source: str,
        reason: Optional[str] = None,
    ):
        self.type = type
        self.timestamp = timestamp
        self.source = source
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
            "reason": self.reason,
        }

    @classmethod
    def parse(cls, raw: Any) -> Optional["SyncMessage"]:
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                return None
        if not isinstance(raw, dict):
            return None
        try:
            return cls(
                type=SyncMessageType(raw["type"]),
                timestamp=datetime.fromisoformat(raw["timestamp"]),
                source=str(raw["source"]),
                reason=raw.get("reason"),
            )
        except (KeyError, TypeError, ValueError):
            return None


class SessionSyncChannel:
    """
    Both paths carry every message: the broadcast transport when one is
    configured, and always the fallback key in the local store. Listeners
    watch both and see each message once.
    """

    SEEN_LIMIT = 64

    def __init__(
        self,
        local_store: ILocalStore,
        fallback_key: str,
        transport: Optional[IBroadcastChannel] = None,
    ):
        self.local_store = local_store
        self.fallback_key = fallback_key
        self.transport = transport
        self.source = uuid.uuid4().hex

    def publish(
        self,
        message_type: SyncMessageType,
        reason: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> None:
        payload = SyncMessage(message_type, timestamp or utcnow(), self.source, reason).to_dict()
        if self.transport is not None:
            try:
                self.transport.post_message(payload)
            except Exception:
                logger.warning("Session sync broadcast failed (%s)", message_type.value, exc_info=True)
        try:
            self.local_store.set(self.fallback_key, json.dumps(payload))
        except Exception:
            logger.warning("Session sync publish failed (%s)", message_type.value, exc_info=True)

    def listen(self, handler: Callable[[SyncMessage], None]) -> Callable[[], None]:
        """Deliver messages from sibling contexts; returns the unsubscribe function."""
        seen: "OrderedDict[Tuple[str, datetime, SyncMessageType], None]" = OrderedDict()

        def deliver(raw: Any) -> None:
            message = SyncMessage.parse(raw)
            if message is None:
                logger.debug("Ignoring malformed session sync message")
                return
            if message.source == self.source:
                return
            key = (message.source, message.timestamp, message.type)
            if key in seen:
                return
            seen[key] = None
            if len(seen) > self.SEEN_LIMIT:
                seen.popitem(last=False)
            handler(message)

        def on_storage(key: str, value: Optional[str]) -> None:
            if key == self.fallback_key and value is not None:
                deliver(value)

        unsubscribers: List[Callable[[], None]] = [self.local_store.watch(on_storage)]
        if self.transport is not None:
            unsubscribers.append(self.transport.subscribe(deliver))

        def unsubscribe() -> None:
            for stop in unsubscribers:
                stop()

        return unsubscribe

    def close(self) -> None:
        if self.transport is not None:
            try:
                self.transport.close()
            except Exception:
                logger.warning("Session sync close failed", exc_info=True)

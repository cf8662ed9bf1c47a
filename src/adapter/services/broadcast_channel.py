"""
In-Process Broadcast Channel

The IBroadcastChannel transport for client contexts that share one process:
the default transport handed to SessionSyncChannel when sibling contexts
live together, and the one the session sync tests run on. Contexts in
separate processes rely on the local-store path of SessionSyncChannel.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

from src.app.services.session_sync import IBroadcastChannel

logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any]], None]


class BroadcastHub:
    """Named in-process channels; a message reaches every other open channel of the same name"""

    def __init__(self):
        self._channels: Dict[str, List["InProcessBroadcastChannel"]] = defaultdict(list)

    def open(self, name: str) -> "InProcessBroadcastChannel":
        channel = InProcessBroadcastChannel(self, name)
        self._channels[name].append(channel)
        return channel

    def _deliver(self, sender: "InProcessBroadcastChannel", message: Dict[str, Any]) -> None:
        for channel in list(self._channels[sender.name]):
            if channel is not sender:
                channel._receive(message)

    def _detach(self, channel: "InProcessBroadcastChannel") -> None:
        members = self._channels.get(channel.name, [])
        if channel in members:
            members.remove(channel)


class InProcessBroadcastChannel(IBroadcastChannel):
    def __init__(self, hub: BroadcastHub, name: str):
        self.hub = hub
        self.name = name
        self.closed = False
        self._listeners: List[Listener] = []

    def post_message(self, message: Dict[str, Any]) -> None:
        if self.closed:
            raise RuntimeError(f"Broadcast channel {self.name} is closed")
        self.hub._deliver(self, dict(message))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        self.closed = True
        self._listeners.clear()
        self.hub._detach(self)

    def _receive(self, message: Dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                logger.warning("Broadcast listener failed on %s", self.name, exc_info=True)

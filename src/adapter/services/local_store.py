import logging
from typing import Callable, Dict, List, Optional

from src.app.services.local_store import ILocalStore, StorageListener

logger = logging.getLogger(__name__)


class InMemoryLocalStore(ILocalStore):
    """Dict-backed store; share one instance between contexts to share state"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._listeners: List[StorageListener] = []

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._notify(key, value)

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._notify(key, None)

    def watch(self, listener: StorageListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str, value: Optional[str]) -> None:
        for listener in list(self._listeners):
            try:
                listener(key, value)
            except Exception:
                logger.warning("Local store listener failed for %s", key, exc_info=True)

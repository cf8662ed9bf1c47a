from abc import ABC, abstractmethod
from typing import Callable, Optional

StorageListener = Callable[[str, Optional[str]], None]


class ILocalStore(ABC):
    """Client-local string key/value storage shared by sibling contexts"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass

    @abstractmethod
    def watch(self, listener: StorageListener) -> Callable[[], None]:
        """Be told of (key, new_value) changes; returns the unsubscribe function."""
        pass

from abc import ABC, abstractmethod
from datetime import datetime

from src.domain.entities import TokenKind, TokenRecord


class ITokenRecordRepository(ABC):
    """TokenRecord repository interface - application layer"""

    @abstractmethod
    async def exists(self, digest: str, kind: TokenKind) -> bool:
        pass

    @abstractmethod
    async def create(self, record: TokenRecord) -> TokenRecord:
        """Record a digest; raises if the digest is already recorded"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Drop records whose token has expired; returns how many"""
        pass

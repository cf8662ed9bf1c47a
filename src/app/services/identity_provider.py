"""
Identity Provider Port

The external identity service owns users and session tokens. This service
only starts passwordless sign-in, reads the current session, listens for
session changes and signs out.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional
from uuid import UUID


class AuthChangeEvent(str, Enum):
    signed_in = "SIGNED_IN"
    signed_out = "SIGNED_OUT"
    token_refreshed = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class IdentitySession:
    user_id: UUID
    email: str
    access_token: str
    expires_at: Optional[datetime] = None


class IdentityProviderError(Exception):
    """Raised by provider adapters; callers never show the message to users."""


AuthChangeListener = Callable[[AuthChangeEvent, Optional[IdentitySession]], None]


class IIdentityProvider(ABC):
    @abstractmethod
    async def sign_in_with_otp(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Send a magic link. Raises IdentityProviderError."""
        pass

    @abstractmethod
    async def verify_otp(self, token: str) -> IdentitySession:
        """Redeem a magic-link token. Raises IdentityProviderError."""
        pass

    @abstractmethod
    async def get_session(self) -> Optional[IdentitySession]:
        pass

    @abstractmethod
    def on_auth_state_change(self, listener: AuthChangeListener) -> Callable[[], None]:
        """Subscribe to session changes; returns the unsubscribe function."""
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """Invalidate the session. Raises IdentityProviderError."""
        pass

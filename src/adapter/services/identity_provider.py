"""
JWT Magic-Link Identity Provider

Passwordless identity: a signed, single-use magic-link token is exchanged
for an access token. Delivery of the link is delegated to a sender callable
(outbound email lives outside this service); the default sender only logs.
"""

import hashlib
import inspect
import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, List, Optional
from uuid import NAMESPACE_URL, UUID, uuid5

from sqlalchemy.exc import IntegrityError

from config import ApplicationConfig
from src.api.utils.jwt import (
    MAGIC_LINK_TOKEN,
    generate_jwt,
    generate_magic_link_token,
    verify_jwt,
)
from src.app.services.identity_provider import (
    AuthChangeEvent,
    AuthChangeListener,
    IdentityProviderError,
    IdentitySession,
    IIdentityProvider,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import TokenKind, TokenRecord

logger = logging.getLogger(__name__)

LinkSender = Callable[[str, str], Any]


def identity_user_id(email: str) -> UUID:
    """Stable identity user ID for an email address"""
    return uuid5(NAMESPACE_URL, f"mailto:{email.strip().lower()}")


def _hash(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC).replace(tzinfo=None)
    return moment


class TokenLedger:
    """
    Redeemed magic-link nonces and revoked access tokens, persisted as
    SHA-256 digests so they survive restarts and are shared by every worker.
    Each write also prunes records whose token has expired.
    """

    def __init__(self, uow_factory: Callable[[], UnitOfWork]):
        self.uow_factory = uow_factory

    async def redeem(self, nonce: str, expires_at: datetime) -> bool:
        """Spend a magic-link nonce; False when it was spent before"""
        digest = _hash(nonce)
        try:
            async with self.uow_factory() as uow:
                if await uow.token_records.exists(digest, TokenKind.magic_link):
                    return False
                await self._record(uow, digest, TokenKind.magic_link, expires_at)
        except IntegrityError:
            logger.info("Magic link redeemed concurrently")
            return False
        return True

    async def revoke(self, access_token: str, expires_at: datetime) -> None:
        digest = _hash(access_token)
        try:
            async with self.uow_factory() as uow:
                if await uow.token_records.exists(digest, TokenKind.access_token):
                    return
                await self._record(uow, digest, TokenKind.access_token, expires_at)
        except IntegrityError:
            logger.info("Access token revoked concurrently")

    async def is_revoked(self, access_token: str) -> bool:
        async with self.uow_factory() as uow:
            return await uow.token_records.exists(_hash(access_token), TokenKind.access_token)

    async def _record(
        self, uow: UnitOfWork, digest: str, kind: TokenKind, expires_at: datetime
    ) -> None:
        pruned = await uow.token_records.delete_expired(utcnow())
        await uow.token_records.create(
            TokenRecord(digest=digest, kind=kind, expires_at=_naive_utc(expires_at))
        )
        await uow.commit()
        if pruned:
            logger.debug("Pruned %d expired token records", pruned)


def log_magic_link(email: str, link: str) -> None:
    logger.info("Magic link issued for %s", email)
    logger.debug("Magic link: %s", link)


class JwtIdentityProvider(IIdentityProvider):
    def __init__(
        self,
        ledger: TokenLedger,
        sender: LinkSender = log_magic_link,
        redirect_url: str = ApplicationConfig.AUTH_REDIRECT_URL,
    ):
        self.ledger = ledger
        self.sender = sender
        self.redirect_url = redirect_url
        self._session: Optional[IdentitySession] = None
        self._listeners: List[AuthChangeListener] = []

    async def sign_in_with_otp(self, email: str, redirect_to: Optional[str] = None) -> None:
        email = (email or "").strip().lower()
        if "@" not in email:
            raise IdentityProviderError("invalid email")

        token = generate_magic_link_token(email, secrets.token_urlsafe(32))
        link = f"{redirect_to or self.redirect_url}?token={token}"
        try:
            result = self.sender(email, link)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            raise IdentityProviderError("magic link delivery failed") from exc

    async def verify_otp(self, token: str) -> IdentitySession:
        payload = verify_jwt(token, purpose=MAGIC_LINK_TOKEN)
        if payload is None:
            raise IdentityProviderError("invalid or expired magic link")
        expires_at = datetime.fromtimestamp(payload["exp"], UTC)
        if not await self.ledger.redeem(payload["nonce"], expires_at):
            raise IdentityProviderError("magic link already used")

        email = payload["email"]
        user_id = identity_user_id(email)
        session = IdentitySession(
            user_id=user_id,
            email=email,
            access_token=generate_jwt(user_id, email),
            expires_at=datetime.now(UTC)
            + timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_MINUTES),
        )
        self._set_session(AuthChangeEvent.signed_in, session)
        return session

    async def restore_session(self, access_token: str) -> Optional[IdentitySession]:
        """Adopt an access token issued earlier, e.g. from a bearer header"""
        if await self.ledger.is_revoked(access_token):
            return None
        payload = verify_jwt(access_token)
        if payload is None:
            return None
        session = IdentitySession(
            user_id=UUID(payload["user_id"]),
            email=payload["email"],
            access_token=access_token,
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
        self._session = session
        return session

    async def get_session(self) -> Optional[IdentitySession]:
        session = self._session
        if session is None:
            return None
        if await self.ledger.is_revoked(session.access_token):
            self._session = None
            return None
        if session.expires_at is not None and session.expires_at <= datetime.now(UTC):
            self._session = None
            return None
        return session

    def on_auth_state_change(self, listener: AuthChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_out(self) -> None:
        if self._session is not None:
            expires_at = self._session.expires_at or datetime.now(UTC) + timedelta(
                minutes=ApplicationConfig.ACCESS_TOKEN_MINUTES
            )
            await self.ledger.revoke(self._session.access_token, expires_at)
        self._set_session(AuthChangeEvent.signed_out, None)

    def _set_session(self, event: AuthChangeEvent, session: Optional[IdentitySession]) -> None:
        self._session = session
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                logger.warning("Auth state listener failed on %s", event.value, exc_info=True)

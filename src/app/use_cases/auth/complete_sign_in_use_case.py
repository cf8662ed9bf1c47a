"""
Complete Sign-In Use Case

Redeems a magic link and makes sure the signed-in identity has a profile.
"""

import logging
from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.audit_logger import AuditActions, ResourceTypes, build_audit_event
from src.app.services.identity_provider import IdentityProviderError, IIdentityProvider
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import UserProfile
from .dtos import SignInResponse

logger = logging.getLogger(__name__)


class CompleteSignInUseCase:
    """
    Use case for exchanging a magic-link token for an access token.

    Business Rules:
    - Token is single-use and short-lived (provider enforces)
    - First completed sign-in creates the UserProfile (id = identity user id)
    - Existing profiles are never recreated; status is left untouched, so a
      suspended profile can sign in but lands on the suspended surface
    - Updates last_login_at and writes a user_signed_in audit event
    """

    def __init__(self, uow: UnitOfWork, provider: IIdentityProvider):
        self.uow = uow
        self.provider = provider

    async def execute(
        self,
        token: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[SignInResponse]:
        try:
            session = await self.provider.verify_otp(token)
        except IdentityProviderError:
            logger.warning("Magic link redemption failed", exc_info=True)
            return Return.err(Error("AUTH_FAILED", "Unable to sign in, try again"))

        async with self.uow:
            profile = await self.uow.profiles.get_by_id(session.user_id)
            is_new = profile is None

            if is_new:
                profile = await self.uow.profiles.create(
                    UserProfile(id=session.user_id, email=session.email)
                )
                await self.uow.audit_events.create(
                    build_audit_event(
                        AuditActions.USER_CREATED,
                        ResourceTypes.USER,
                        actor_id=profile.id,
                        resource_id=profile.id,
                        details={"email": profile.email},
                    )
                )

            profile.last_login_at = utcnow()
            await self.uow.profiles.update(profile)

            await self.uow.audit_events.create(
                build_audit_event(
                    AuditActions.USER_SIGNED_IN,
                    ResourceTypes.SESSION,
                    actor_id=profile.id,
                    resource_id=profile.id,
                    details={"email": profile.email, "method": "magic_link"},
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
            )

            await self.uow.commit()

        return Return.ok(
            SignInResponse(
                access_token=session.access_token,
                user_id=str(session.user_id),
                email=session.email,
                is_new_profile=is_new,
                expires_at=session.expires_at,
            )
        )

"""
Sign Out Use Case

Ends the provider session and records why the session ended.
"""

import logging
from uuid import UUID

from libs.result import Result, Return
from src.app.services.audit_logger import ResourceTypes, build_audit_event
from src.app.services.identity_provider import IIdentityProvider
from src.app.services.session_timeout import sign_in_destination
from src.app.services.unit_of_work import UnitOfWork
from src.domain.policies.session_timeout import LogoutReason, SessionAuditEvents
from .dtos import SignOutResponse

logger = logging.getLogger(__name__)


class SignOutUseCase:
    """
    Use case for signing out (manual, idle or absolute-lifetime expiry).

    Business Rules:
    - Provider sign-out failure never blocks sign-out (fail open, no retry)
    - Audit action depends on the reason code
    - Response carries the sign-in destination with ?reason=
    """

    def __init__(self, uow: UnitOfWork, provider: IIdentityProvider):
        self.uow = uow
        self.provider = provider

    async def execute(
        self, user_id: UUID, reason: LogoutReason = LogoutReason.manual
    ) -> Result[SignOutResponse]:
        reason = LogoutReason(reason)
        try:
            await self.provider.sign_out()
        except Exception:
            logger.error("Provider sign-out failed for %s", user_id, exc_info=True)

        async with self.uow:
            await self.uow.audit_events.create(
                build_audit_event(
                    SessionAuditEvents.for_reason(reason),
                    ResourceTypes.SESSION,
                    actor_id=user_id,
                    resource_id=user_id,
                    details={"reason": reason.value},
                )
            )
            await self.uow.commit()

        return Return.ok(
            SignOutResponse(reason=reason.value, redirect_to=sign_in_destination(reason))
        )

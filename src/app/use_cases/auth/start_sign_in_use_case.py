"""
Start Sign-In Use Case

Requests a magic link from the identity provider.
"""

import logging
from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.identity_provider import IdentityProviderError, IIdentityProvider
from .dtos import MagicLinkResponse

logger = logging.getLogger(__name__)


class StartSignInUseCase:
    """
    Use case for requesting a passwordless sign-in link.

    Business Rules:
    - No email enumeration: the response is the same for known and unknown emails
    - Provider failures surface only as a generic AUTH_FAILED
    """

    def __init__(self, provider: IIdentityProvider):
        self.provider = provider

    async def execute(
        self, email: str, redirect_to: Optional[str] = None
    ) -> Result[MagicLinkResponse]:
        try:
            await self.provider.sign_in_with_otp(email, redirect_to)
        except IdentityProviderError:
            logger.warning("Magic link request rejected by provider", exc_info=True)
            return Return.err(Error("AUTH_FAILED", "Unable to sign in, try again"))

        return Return.ok(
            MagicLinkResponse(
                status="sent",
                message="If the address can sign in, a sign-in link has been sent",
            )
        )

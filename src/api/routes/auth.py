from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import ClientError, ServerError
from src.app.services.identity_provider import IIdentityProvider
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    CompleteSignInUseCase,
    MagicLinkResponse,
    SignInResponse,
    SignOutResponse,
    SignOutUseCase,
    StartSignInUseCase,
)
from src.depends import get_current_user, get_identity_provider, get_unit_of_work
from src.domain.policies.session_timeout import LogoutReason

router = APIRouter(prefix="/auth", tags=["Authentication"])


class MagicLinkRequest(BaseModel):
    """Magic-link sign-in request payload"""

    email: EmailStr = Field(..., description="Email address to send the link to")
    redirect_to: Optional[str] = Field(None, description="Callback URL for the link")


class CallbackRequest(BaseModel):
    """Magic-link redemption payload"""

    token: str = Field(..., min_length=1, description="Token from the magic link")


class SignOutRequest(BaseModel):
    """Sign-out payload; reason selects the audit action and redirect"""

    reason: LogoutReason = Field(LogoutReason.manual, description="idle, max-session or manual")


@router.post(
    "/magic-link", status_code=status.HTTP_202_ACCEPTED, response_model=MagicLinkResponse
)
async def request_magic_link(
    request: MagicLinkRequest,
    provider: IIdentityProvider = Depends(get_identity_provider),
):
    """
    Start Passwordless Sign-In

    Same 202 response whether or not the address belongs to anyone.

    Raises:
        - 400 Bad Request: AUTH_FAILED (provider rejected the request)
        - 422 Unprocessable Entity: Invalid email
    """
    use_case = StartSignInUseCase(provider)
    result = await use_case.execute(request.email, request.redirect_to)

    if result.is_err():
        error = result.error
        if error.code == "AUTH_FAILED":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


@router.post("/callback", status_code=status.HTTP_200_OK, response_model=SignInResponse)
async def complete_sign_in(
    request: CallbackRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    provider: IIdentityProvider = Depends(get_identity_provider),
):
    """
    Complete Magic-Link Sign-In

    Exchanges a single-use link token for an access token and creates the
    profile on first sign-in.

    Raises:
        - 401 Unauthorized: AUTH_FAILED (invalid, expired or reused link)
    """
    forwarded = http_request.headers.get("x-forwarded-for")
    ip_address = forwarded.split(",")[0].strip() if forwarded else None
    if ip_address is None and http_request.client is not None:
        ip_address = http_request.client.host

    use_case = CompleteSignInUseCase(uow, provider)
    result = await use_case.execute(
        request.token,
        ip_address=ip_address,
        user_agent=http_request.headers.get("user-agent"),
    )

    if result.is_err():
        error = result.error
        if error.code == "AUTH_FAILED":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value


@router.post("/sign-out", status_code=status.HTTP_200_OK, response_model=SignOutResponse)
async def sign_out(
    request: SignOutRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    provider=Depends(get_identity_provider),
):
    """
    Sign Out

    Revokes the bearer token and records the reason. Always succeeds for a
    valid token; the response names the sign-in page to return to.
    """
    await provider.restore_session(current_user["token"])

    use_case = SignOutUseCase(uow, provider)
    result = await use_case.execute(UUID(current_user["user_id"]), request.reason)

    if result.is_err():
        raise ServerError(result.error)

    return result.value

from typing import Callable
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.identity_provider import JwtIdentityProvider, TokenLedger
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import verify_jwt
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users import load_principal
from src.domain.policies import Permission, has_permission

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer()


def standalone_unit_of_work() -> SqlAlchemyUnitOfWork:
    """Unit of work on its own session, for writes outside a request's transaction"""
    return SqlAlchemyUnitOfWork(AsyncSessionLocal(), close_on_exit=True)


token_ledger = TokenLedger(standalone_unit_of_work)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_ledger() -> TokenLedger:
    return token_ledger


def get_identity_provider(
    ledger: TokenLedger = Depends(get_token_ledger),
) -> JwtIdentityProvider:
    return JwtIdentityProvider(ledger)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    ledger: TokenLedger = Depends(get_token_ledger),
) -> dict:
    """
    Dependency to extract and verify JWT token from Authorization header.

    Returns:
        Decoded JWT payload containing user_id and email, plus the raw token

    Raises:
        HTTPException: 401 if token is invalid, expired or signed out
    """
    token = credentials.credentials
    payload = verify_jwt(token)

    if payload is None or await ledger.is_revoked(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return {**payload, "token": token}


def require_permission(permission: Permission) -> Callable:
    """
    Dependency factory gating a route on one permission.

    The evaluator only answers yes/no; the 403 is produced here, at the
    HTTP boundary.
    """

    async def checker(
        current_user: dict = Depends(get_current_user),
        uow: UnitOfWork = Depends(get_unit_of_work),
    ) -> dict:
        async with uow:
            principal, _, _ = await load_principal(uow, UUID(current_user["user_id"]))

        if not has_permission(principal, permission):
            raise ClientError(
                Error("PERMISSION_DENIED", "You do not have access to this resource"),
                status_code=status.HTTP_403_FORBIDDEN,
            )
        return {**current_user, "is_platform_admin": principal.is_platform_admin}

    return checker

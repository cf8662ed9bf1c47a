from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, status

from libs.result import Error
from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users import (
    AccessResponse,
    GetAccessUseCase,
    GetMeUseCase,
    MeResponse,
)
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/me", tags=["User"])


@router.get("", status_code=status.HTTP_200_OK, response_model=MeResponse)
async def get_me(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    x_active_tenant: Optional[str] = Header(None),
    x_active_context: Optional[str] = Header(None),
):
    """
    Get Current Identity

    Profile, every membership, the landing access state and the resolved
    tenant/context. Clients may send their stored selection in the
    X-Active-Tenant / X-Active-Context headers.
    """
    use_case = GetMeUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["user_id"]),
        stored_tenant_id=x_active_tenant,
        stored_context=x_active_context,
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get("/access", status_code=status.HTTP_200_OK, response_model=AccessResponse)
async def get_access(
    tenant_id: Optional[str] = Query(None, description="Tenant to evaluate; defaults to the active tenant"),
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Permission Map

    Every permission evaluated for the caller. Denied permissions are false
    entries, not errors.

    Raises:
        - 400 Bad Request: Invalid tenant_id format
    """
    target = None
    if tenant_id:
        try:
            target = UUID(tenant_id)
        except ValueError:
            raise ClientError(
                Error("INVALID_TENANT_ID", "Invalid tenant ID format"),
                status_code=status.HTTP_400_BAD_REQUEST,
            )

    use_case = GetAccessUseCase(uow)
    result = await use_case.execute(UUID(current_user["user_id"]), target)

    if result.is_err():
        raise ServerError(result.error)

    return result.value

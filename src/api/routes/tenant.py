from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from libs.result import Error
from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.tenants import SwitchTenantResponse, SwitchTenantUseCase
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/tenants", tags=["Tenant"])


class SwitchTenantRequest(BaseModel):
    """
    Switch tenant HTTP request payload

    current_context / stored_context carry the client's selection so the
    context can be preserved across the switch.
    """

    tenant_id: str = Field(..., description="Target tenant ID to switch to")
    current_context: Optional[str] = Field(None, description="Context active before the switch")
    stored_context: Optional[str] = Field(None, description="Stored preference for the target")


@router.post(
    "/switch", status_code=status.HTTP_200_OK, response_model=SwitchTenantResponse
)
async def switch_tenant(
    request: SwitchTenantRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Switch Active Tenant

    Raises:
        - 400 Bad Request: Invalid tenant_id format
        - 403 Forbidden: NOT_A_MEMBER (no active membership in the target)
        - 404 Not Found: PROFILE_NOT_FOUND
    """
    user_id = UUID(current_user["user_id"])

    try:
        target_tenant_id = UUID(request.tenant_id)
    except ValueError:
        raise ClientError(
            Error("INVALID_TENANT_ID", "Invalid tenant ID format"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    use_case = SwitchTenantUseCase(uow)
    result = await use_case.execute(
        user_id,
        target_tenant_id,
        current_context=request.current_context,
        stored_context=request.stored_context,
    )

    if result.is_err():
        error = result.error
        if error.code == "NOT_A_MEMBER":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == "PROFILE_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value

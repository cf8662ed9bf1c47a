"""
Audit API Routes

Append-only audit log writes and paginated reads.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.audit import (
    AuditEventPage,
    AuditWriteResponse,
    GetAuditEventsUseCase,
    WriteAuditEventUseCase,
)
from src.depends import get_current_user, get_unit_of_work, require_permission
from src.domain.policies import Permission

router = APIRouter(prefix="/audit-log", tags=["Audit"])


class AuditLogRequest(BaseModel):
    """POST /audit-log payload"""

    action: str = Field(..., min_length=1, max_length=100)
    resource_type: str = Field(..., min_length=1, max_length=100)
    resource_id: Optional[str] = Field(None, max_length=100)
    tenant_id: Optional[UUID] = None
    user_id: Optional[UUID] = Field(None, description="Actor; defaults to the caller")
    details: Dict[str, Any] = Field(default_factory=dict)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AuditWriteResponse)
async def write_audit_log(
    request: AuditLogRequest,
    http_request: Request,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Write Audit Log Entry

    Raises:
        - 400 Bad Request: VALIDATION_ERROR
    """
    forwarded = http_request.headers.get("x-forwarded-for")
    ip_address = forwarded.split(",")[0].strip() if forwarded else None

    use_case = WriteAuditEventUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["user_id"]),
        request.action,
        request.resource_type,
        resource_id=request.resource_id,
        tenant_id=request.tenant_id,
        actor_id=request.user_id,
        details=request.details,
        ip_address=ip_address,
        user_agent=http_request.headers.get("user-agent"),
    )

    if result.is_err():
        error = result.error
        if error.code == "VALIDATION_ERROR":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


@router.get("", status_code=status.HTTP_200_OK, response_model=AuditEventPage)
async def read_audit_log(
    tenant_id: Optional[UUID] = Query(None),
    action: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of events to return"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
    current_user: dict = Depends(require_permission(Permission.platform_view_audit_logs)),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Read Audit Log

    Platform administrators and external auditors only.

    Returns:
        - events: newest first
        - next_cursor: cursor for the next page (null if no more events)
    """
    use_case = GetAuditEventsUseCase(uow)
    result = await use_case.execute(
        tenant_id=tenant_id, action=action, limit=limit, cursor=cursor
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value

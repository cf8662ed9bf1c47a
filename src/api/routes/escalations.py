"""
Escalation API Routes

Platform-administrator management of SLA rules and escalation events, plus
the scheduler's periodic check.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from libs.result import Error
from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.escalations import (
    CheckEscalationsUseCase,
    EscalationCheckResponse,
    EscalationEventInfo,
    EscalationRuleInfo,
    EscalationRulesResponse,
    ListEscalationEventsUseCase,
    ListEscalationRulesUseCase,
    ResolveEscalationUseCase,
    SeedEscalationRulesUseCase,
    UpsertEscalationRuleUseCase,
)
from src.depends import get_unit_of_work, require_permission
from src.domain.entities import (
    EscalationStatus,
    NotificationPriority,
    NotificationType,
    PlatformRole,
)
from src.domain.policies import Permission

router = APIRouter(prefix="/escalations", tags=["Escalations"])

require_platform_admin = require_permission(Permission.platform_admin)


class UpsertRuleRequest(BaseModel):
    notification_type: NotificationType
    priority: NotificationPriority
    sla_minutes: int = Field(..., ge=0)
    escalation_target_role: PlatformRole = PlatformRole.platform_admin
    tenant_id: Optional[UUID] = None
    is_active: bool = True


class ResolveEscalationRequest(BaseModel):
    notes: Optional[str] = None


def _raise_for(error: Error):
    if error.code == "ESCALATION_NOT_FOUND":
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    elif error.code == "ALREADY_RESOLVED":
        raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
    elif error.code == "INVALID_SLA":
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise ServerError(error)


@router.get("/rules", status_code=status.HTTP_200_OK, response_model=EscalationRulesResponse)
async def list_rules(
    current_user: dict = Depends(require_platform_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Configured rules plus the default SLA table"""
    result = await ListEscalationRulesUseCase(uow).execute()
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.put("/rules", status_code=status.HTTP_200_OK, response_model=EscalationRuleInfo)
async def upsert_rule(
    request: UpsertRuleRequest,
    current_user: dict = Depends(require_platform_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Create or update the rule for a (type, priority, tenant) scope"""
    result = await UpsertEscalationRuleUseCase(uow).execute(
        UUID(current_user["user_id"]),
        request.notification_type,
        request.priority,
        request.sla_minutes,
        escalation_target_role=request.escalation_target_role,
        tenant_id=request.tenant_id,
        is_active=request.is_active,
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post("/rules/seed", status_code=status.HTTP_200_OK, response_model=EscalationRulesResponse)
async def seed_rules(
    current_user: dict = Depends(require_platform_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Create global rules from the default SLA table where missing"""
    result = await SeedEscalationRulesUseCase(uow).execute(UUID(current_user["user_id"]))
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post(
    "/check",
    status_code=status.HTTP_200_OK,
    response_model=EscalationCheckResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def check_escalations(uow: UnitOfWork = Depends(get_unit_of_work)):
    """Fire lapsed SLAs (scheduler endpoint, X-Admin-API-Key)"""
    result = await CheckEscalationsUseCase(uow).execute()
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.get("/events", status_code=status.HTTP_200_OK, response_model=List[EscalationEventInfo])
async def list_events(
    status_filter: Optional[EscalationStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    current_user: dict = Depends(require_platform_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ListEscalationEventsUseCase(uow).execute(status=status_filter, limit=limit)
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post(
    "/events/{event_id}/resolve",
    status_code=status.HTTP_200_OK,
    response_model=EscalationEventInfo,
)
async def resolve_event(
    event_id: str,
    request: ResolveEscalationRequest,
    current_user: dict = Depends(require_platform_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    try:
        target = UUID(event_id)
    except ValueError:
        raise ClientError(
            Error("INVALID_EVENT_ID", "Invalid escalation event ID format"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    result = await ResolveEscalationUseCase(uow).execute(
        UUID(current_user["user_id"]), target, notes=request.notes
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value

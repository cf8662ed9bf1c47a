"""
Notification API Routes

Recipient-facing notification centre plus the service-side create and
archive endpoints.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.notifications import (
    AcknowledgeAllNotificationsUseCase,
    AcknowledgeNotificationUseCase,
    ArchiveNotificationsUseCase,
    BulkUpdateResponse,
    CreateNotificationUseCase,
    GetUnreadCountUseCase,
    ListNotificationsUseCase,
    NotificationInfo,
    NotificationListResponse,
    ResolveNotificationUseCase,
    UnreadCountResponse,
)
from src.depends import get_current_user, get_unit_of_work
from src.domain.entities import NotificationPriority, NotificationType, ResolutionType

router = APIRouter(prefix="/notifications", tags=["Notifications"])


class CreateNotificationRequest(BaseModel):
    recipient_id: UUID
    notification_type: NotificationType
    priority: NotificationPriority = NotificationPriority.normal
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    tenant_id: Optional[UUID] = None
    record_type: Optional[str] = None
    record_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ResolveNotificationRequest(BaseModel):
    resolution_type: ResolutionType
    notes: Optional[str] = None


def _parse_id(notification_id: str) -> UUID:
    try:
        return UUID(notification_id)
    except ValueError:
        raise ClientError(
            Error("INVALID_NOTIFICATION_ID", "Invalid notification ID format"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )


def _raise_for(error: Error):
    if error.code in ("NOTIFICATION_NOT_FOUND", "RECIPIENT_NOT_FOUND"):
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    elif error.code == "ALREADY_RESOLVED":
        raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
    raise ServerError(error)


@router.get("", status_code=status.HTTP_200_OK, response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(ApplicationConfig.NOTIFICATION_PAGE_SIZE, ge=1, le=200),
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Caller's notifications, newest first, archived ones excluded"""
    use_case = ListNotificationsUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["user_id"]), unread_only=unread_only, limit=limit
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.get("/unread-count", status_code=status.HTTP_200_OK, response_model=UnreadCountResponse)
async def unread_count(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = GetUnreadCountUseCase(uow)
    result = await use_case.execute(UUID(current_user["user_id"]))
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=NotificationInfo,
    dependencies=[Depends(verify_admin_api_key)],
)
async def create_notification(
    request: CreateNotificationRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Record a Notification (service endpoint, X-Admin-API-Key)

    Resolution requirement and retention category are derived from the type.
    """
    use_case = CreateNotificationUseCase(uow)
    result = await use_case.execute(
        recipient_id=request.recipient_id,
        notification_type=request.notification_type,
        title=request.title,
        message=request.message,
        priority=request.priority,
        tenant_id=request.tenant_id,
        record_type=request.record_type,
        record_id=request.record_id,
        metadata=request.metadata,
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post("/acknowledge-all", status_code=status.HTTP_200_OK, response_model=BulkUpdateResponse)
async def acknowledge_all(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = AcknowledgeAllNotificationsUseCase(uow)
    result = await use_case.execute(UUID(current_user["user_id"]))
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post(
    "/archive",
    status_code=status.HTTP_200_OK,
    response_model=BulkUpdateResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def archive_notifications(uow: UnitOfWork = Depends(get_unit_of_work)):
    """Archive resolved notifications past the retention window (scheduler endpoint)"""
    use_case = ArchiveNotificationsUseCase(uow)
    result = await use_case.execute(ApplicationConfig.NOTIFICATION_ARCHIVE_DAYS)
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post(
    "/{notification_id}/acknowledge",
    status_code=status.HTTP_200_OK,
    response_model=NotificationInfo,
)
async def acknowledge_notification(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Acknowledge (mark seen)

    Does not resolve; a notification that requires resolution stays
    undismissable until resolved.
    """
    use_case = AcknowledgeNotificationUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["user_id"]), _parse_id(notification_id)
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post(
    "/{notification_id}/resolve",
    status_code=status.HTTP_200_OK,
    response_model=NotificationInfo,
)
async def resolve_notification(
    notification_id: str,
    request: ResolveNotificationRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Resolve

    Raises:
        - 404 Not Found: NOTIFICATION_NOT_FOUND
        - 409 Conflict: ALREADY_RESOLVED
    """
    use_case = ResolveNotificationUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["user_id"]),
        _parse_id(notification_id),
        request.resolution_type,
        notes=request.notes,
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value

"""
Notification endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...shared.api import DataResponse, create_data_response
from ...shared.auth import get_current_user
from ...shared.exceptions import WebUIBackendException
from ...shared.utils import CurrentUser
from ..dependencies import get_notification_service
from ..services.notification_service import NotificationService
from .dto.requests.notification_requests import CreateNotificationRequest
from .dto.responses.notification_responses import NotificationResponse

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/notifications")
async def list_notifications(
    is_read: Optional[bool] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        result = notification_service.list_notifications(
            user_id, is_read=is_read, limit=limit, offset=offset
        )
        return create_data_response(
            {
                "notifications": [
                    NotificationResponse.model_validate(n) for n in result["notifications"]
                ],
                "unread_count": result["unread_count"],
                "total": result["total"],
            }
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error listing notifications for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve notifications",
        )


@router.get("/notifications/unread-count")
async def get_unread_count(
    user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response({"unread_count": notification_service.unread_count(user_id)})
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error counting unread notifications for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve unread count",
        )


@router.patch("/notifications/read-all")
async def mark_all_as_read(
    user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        updated_count = notification_service.mark_all_as_read(user_id)
        return create_data_response(
            {"updated_count": updated_count}, message="All notifications marked as read"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error marking notifications read for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to mark notifications as read",
        )


@router.patch("/notifications/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        notification_service.mark_as_read(notification_id, user_id)
        return create_data_response(message="Notification marked as read")
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error marking notification %s read: %s", notification_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to mark notification as read",
        )


@router.post("/notifications", status_code=status.HTTP_201_CREATED)
async def create_notification(
    request: CreateNotificationRequest,
    user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        notification = notification_service.create_notification(
            user_id,
            notification_type=request.type,
            title=request.title,
            message=request.message,
            todo_id=request.todo_id or None,
        )
        return create_data_response(
            NotificationResponse.model_validate(notification),
            message="Notification created successfully",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error creating notification for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create notification",
        )


@router.delete("/notifications/cleanup")
async def cleanup_notifications(
    user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> DataResponse:
    """Delete the user's read notifications older than the retention period."""
    user_id = user.get("id")
    try:
        deleted_count = notification_service.cleanup_expired_notifications(user_id=user_id)
        return create_data_response(
            {"deleted_count": deleted_count}, message="Expired notifications removed"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error cleaning up notifications for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to clean up notifications",
        )

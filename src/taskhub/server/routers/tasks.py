"""
Task endpoints across all projects the user can access.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...shared.api import DataResponse, create_data_response, create_paginated_response, get_pagination_or_default
from ...shared.auth import get_current_user
from ...shared.exceptions import WebUIBackendException
from ...shared.utils import CurrentUser
from ..dependencies import get_task_service
from ..services.task_service import TaskService
from ..utils.text_utils import parse_tags
from .dto.requests.task_requests import BatchUpdateStatusRequest, TaskFilter, UpdateTaskRequest
from .dto.responses.task_responses import TaskResponse

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/tasks")
async def search_tasks(
    project_id: Optional[str] = Query(None),
    assignee_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    tags: Optional[str] = Query(None, description="Comma separated; matches any"),
    search: Optional[str] = Query(None),
    overdue: bool = Query(False),
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sort_by: str = Query("updated_at"),
    sort_order: str = Query("desc"),
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    """
    Filter tasks across every accessible project.

    Priority sorting is by rank (high before low in descending order) and
    ``overdue`` selects incomplete tasks whose due date has passed.
    """
    user_id = user.get("id")
    pagination = get_pagination_or_default(page, limit)
    try:
        task_filter = TaskFilter(
            project_id=project_id or None,
            assignee_id=assignee_id or None,
            status=status_filter,
            priority=priority,
            tags=parse_tags(tags),
            search=search.strip() if search and search.strip() else None,
            overdue=overdue,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        tasks, total = task_service.search_tasks(user_id, task_filter, pagination)
        return create_paginated_response(
            [TaskResponse.model_validate(t) for t in tasks], pagination, total, key="tasks"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error searching tasks for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve tasks",
        )


@router.get("/tasks/stats")
async def get_task_stats(
    project_id: Optional[str] = Query(None),
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(task_service.get_stats(user_id, project_id=project_id or None))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error computing task stats for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve task stats",
        )


@router.get("/tasks/tags")
async def get_task_tags(
    project_id: Optional[str] = Query(None),
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(
            {"tags": task_service.get_tags(user_id, project_id=project_id or None)}
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error listing task tags for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve task tags",
        )


@router.put("/tasks/batch/status")
async def batch_update_status(
    request: BatchUpdateStatusRequest,
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    """Set the status of several tasks. Tasks the user cannot write are skipped."""
    user_id = user.get("id")
    try:
        updated_count = task_service.batch_update_status(user_id, request.task_ids, request.status)
        return create_data_response(
            {"updated_count": updated_count},
            message=f"Updated {updated_count} tasks",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error batch updating tasks for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update tasks",
        )


@router.get("/tasks/{task_id}")
async def get_task(
    task_id: str,
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(TaskResponse.model_validate(task_service.get_task(task_id, user_id)))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error fetching task %s: %s", task_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve task",
        )


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str,
    request: UpdateTaskRequest,
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        task = task_service.update_task(task_id, user_id, request.model_dump(exclude_unset=True))
        return create_data_response(
            TaskResponse.model_validate(task), message="Task updated successfully"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        log.warning("Validation error updating task %s: %s", task_id, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error updating task %s: %s", task_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update task",
        )


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        task_service.delete_task(task_id, user_id)
        return create_data_response(message="Task deleted successfully")
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error deleting task %s: %s", task_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete task",
        )


@router.get("/tasks/{task_id}/dependencies")
async def get_task_dependencies(
    task_id: str,
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        result = task_service.get_dependencies(task_id, user_id)
        return create_data_response(
            {
                "dependencies": [TaskResponse.model_validate(t) for t in result["dependencies"]],
                "all_completed": result["all_completed"],
            }
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error fetching dependencies of task %s: %s", task_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve task dependencies",
        )

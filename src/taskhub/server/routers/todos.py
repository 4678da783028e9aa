"""
Personal todo endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from ...shared.api import DataResponse, create_data_response, create_paginated_response, get_pagination_or_default
from ...shared.auth import get_current_user
from ...shared.exceptions import WebUIBackendException
from ...shared.utils import CurrentUser
from ..dependencies import get_todo_service
from ..services.todo_service import TodoService
from .dto.requests.todo_requests import (
    BatchCreateTodosRequest,
    BatchDeleteTodosRequest,
    BatchUpdateTodosRequest,
    CreateTodoRequest,
    UpdateTodoRequest,
)
from .dto.responses.todo_responses import TodoResponse

log = logging.getLogger(__name__)

router = APIRouter()


def _todo_filter_params(
    completed: Optional[bool] = Query(None),
    priority: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    note_id: Optional[str] = Query(None),
    due_date_from: Optional[str] = Query(None),
    due_date_to: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
) -> dict:
    return {
        "completed": completed,
        "priority": priority,
        "status": status_filter,
        "note_id": note_id,
        "due_date_from": due_date_from,
        "due_date_to": due_date_to,
        "sort_by": sort_by,
        "sort_order": sort_order,
    }


@router.get("/todos")
async def list_todos(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    filters: dict = Depends(_todo_filter_params),
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    pagination = get_pagination_or_default(page, limit)
    try:
        todo_filter = todo_service.build_filter(**filters)
        todos, total = todo_service.list_todos(user_id, todo_filter, pagination)
        return create_paginated_response(
            [TodoResponse.model_validate(t) for t in todos], pagination, total, key="todos"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error listing todos for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve todos",
        )


@router.get("/todos/stats")
async def get_todo_stats(
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(todo_service.get_stats(user_id))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error computing todo stats for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve todo stats",
        )


@router.get("/todos/search")
async def search_todos(
    q: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    filters: dict = Depends(_todo_filter_params),
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    """Match ``q`` against title and description, case-insensitively."""
    user_id = user.get("id")
    pagination = get_pagination_or_default(page, limit)
    try:
        todo_filter = todo_service.build_filter(**filters)
        todos, total = todo_service.search_todos(user_id, q, todo_filter, pagination)
        return create_data_response(
            {
                "todos": [TodoResponse.model_validate(t) for t in todos],
                "total": total,
                "page": pagination.page,
                "limit": pagination.limit,
            }
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error searching todos for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to search todos",
        )


@router.get("/todos/export")
async def export_todos(
    format: str = Query("json"),
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
):
    """Download every todo of the user as a JSON attachment."""
    user_id = user.get("id")
    if format != "json":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported export format. Only json is supported",
        )
    try:
        todos = todo_service.export_todos(user_id)
        return JSONResponse(
            content=[TodoResponse.model_validate(t).model_dump(mode="json") for t in todos],
            headers={"Content-Disposition": 'attachment; filename="todos.json"'},
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error exporting todos for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export todos",
        )


@router.post("/todos", status_code=status.HTTP_201_CREATED)
async def create_todo(
    request: CreateTodoRequest,
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        todo = todo_service.create_todo(user_id, request.model_dump(exclude_unset=True))
        return create_data_response(
            TodoResponse.model_validate(todo), message="Todo created successfully"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error creating todo for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create todo",
        )


@router.post("/todos/batch", status_code=status.HTTP_201_CREATED)
async def create_todos(
    request: BatchCreateTodosRequest,
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        todos = todo_service.create_todos(
            user_id, [item.model_dump(exclude_unset=True) for item in request.todos]
        )
        return create_data_response(
            {"todos": [TodoResponse.model_validate(t) for t in todos]},
            message=f"Created {len(todos)} todos",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error batch creating todos for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create todos",
        )


@router.patch("/todos/batch")
async def update_todos(
    request: BatchUpdateTodosRequest,
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        todos = todo_service.update_todos(
            request.ids, user_id, request.data.model_dump(exclude_unset=True)
        )
        return create_data_response(
            {"todos": [TodoResponse.model_validate(t) for t in todos]},
            message=f"Updated {len(todos)} todos",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error batch updating todos for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update todos",
        )


@router.delete("/todos/batch")
async def delete_todos(
    request: BatchDeleteTodosRequest,
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        deleted = todo_service.delete_todos(request.ids, user_id)
        return create_data_response({"ids": deleted}, message=f"Deleted {len(deleted)} todos")
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error batch deleting todos for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete todos",
        )


@router.get("/todos/{todo_id}")
async def get_todo(
    todo_id: str,
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(TodoResponse.model_validate(todo_service.get_todo(todo_id, user_id)))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error fetching todo %s: %s", todo_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve todo",
        )


@router.put("/todos/{todo_id}")
async def update_todo(
    todo_id: str,
    request: UpdateTodoRequest,
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        todo = todo_service.update_todo(todo_id, user_id, request.model_dump(exclude_unset=True))
        return create_data_response(
            TodoResponse.model_validate(todo), message="Todo updated successfully"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error updating todo %s: %s", todo_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update todo",
        )


@router.delete("/todos/{todo_id}")
async def delete_todo(
    todo_id: str,
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        todo_service.delete_todo(todo_id, user_id)
        return create_data_response(message="Todo deleted successfully")
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error deleting todo %s: %s", todo_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete todo",
        )


@router.patch("/todos/{todo_id}/toggle")
async def toggle_todo(
    todo_id: str,
    user: CurrentUser = Depends(get_current_user),
    todo_service: TodoService = Depends(get_todo_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        todo = todo_service.toggle_todo(todo_id, user_id)
        return create_data_response(TodoResponse.model_validate(todo))
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error toggling todo %s: %s", todo_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to toggle todo",
        )

"""
Project endpoints: CRUD, hierarchy, statistics and project-scoped tasks.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...shared.api import DataResponse, create_data_response, create_paginated_response, get_pagination_or_default
from ...shared.auth import get_current_user
from ...shared.exceptions import WebUIBackendException
from ...shared.utils import CurrentUser
from ..dependencies import get_project_service, get_task_service
from ..services.project_service import ProjectService
from ..services.task_service import TaskService
from .dto.requests.project_requests import CreateProjectRequest, UpdateProjectRequest
from .dto.requests.task_requests import CreateTaskRequest
from .dto.responses.project_responses import ProjectResponse, ProjectTreeNodeResponse
from .dto.responses.task_responses import TaskResponse

log = logging.getLogger(__name__)

router = APIRouter()


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _server_error(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.get("/projects")
async def list_projects(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    parent_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    """
    List projects the user owns or is a member of, most recently updated first.

    An empty ``parent_id`` restricts the list to root projects.
    """
    user_id = user.get("id")
    pagination = get_pagination_or_default(page, limit, default_limit=10)
    try:
        projects, total = project_service.list_projects(
            user_id,
            pagination,
            status=status_filter,
            priority=priority,
            parent_id=parent_id,
            search=search,
        )
        return create_paginated_response(
            [ProjectResponse.model_validate(p) for p in projects],
            pagination,
            total,
            key="projects",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        log.error("Error listing projects for user %s: %s", user_id, e)
        raise _server_error("retrieve projects")


@router.get("/projects/tree")
async def get_project_tree(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    """Accessible projects as a parent/child forest, pruned by the optional filters."""
    user_id = user.get("id")
    try:
        roots = project_service.get_project_tree(
            user_id, status=status_filter, priority=priority, search=search
        )
        return create_data_response(
            {"projects": [ProjectTreeNodeResponse.model_validate(node) for node in roots]}
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        log.error("Error building project tree for user %s: %s", user_id, e)
        raise _server_error("retrieve project tree")


@router.get("/projects/statistics")
async def get_project_statistics(
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(project_service.get_statistics(user_id))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error computing project statistics for user %s: %s", user_id, e)
        raise _server_error("retrieve project statistics")


@router.get("/projects/user/projects")
async def get_member_projects(
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    """Projects the user is a member of, with the user's role on each."""
    user_id = user.get("id")
    try:
        projects = project_service.get_member_projects(user_id)
        return create_data_response(
            {"projects": [ProjectResponse.model_validate(p) for p in projects]}
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error listing member projects for user %s: %s", user_id, e)
        raise _server_error("retrieve user projects")


@router.post("/projects", status_code=status.HTTP_201_CREATED)
async def create_project(
    request: CreateProjectRequest,
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    user_id = user.get("id")
    log.info("Creating project '%s' for user %s", request.name, user_id)
    try:
        project = project_service.create_project(user_id, request.model_dump(exclude_unset=True))
        return create_data_response(
            ProjectResponse.model_validate(project), message="Project created successfully"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        log.warning("Validation error creating project: %s", e)
        raise _bad_request(e)
    except Exception as e:
        log.error("Error creating project for user %s: %s", user_id, e)
        raise _server_error("create project")


@router.get("/projects/{project_id}")
async def get_project(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        project = project_service.get_project(project_id, user_id)
        return create_data_response(ProjectResponse.model_validate(project))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error fetching project %s for user %s: %s", project_id, user_id, e)
        raise _server_error("retrieve project")


@router.put("/projects/{project_id}")
async def update_project(
    project_id: str,
    request: UpdateProjectRequest,
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        project = project_service.update_project(
            project_id, user_id, request.model_dump(exclude_unset=True)
        )
        return create_data_response(
            ProjectResponse.model_validate(project), message="Project updated successfully"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        log.warning("Validation error updating project %s: %s", project_id, e)
        raise _bad_request(e)
    except Exception as e:
        log.error("Error updating project %s for user %s: %s", project_id, user_id, e)
        raise _server_error("update project")


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        project_service.delete_project(project_id, user_id)
        return create_data_response(message="Project deleted successfully")
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error deleting project %s for user %s: %s", project_id, user_id, e)
        raise _server_error("delete project")


@router.get("/projects/{project_id}/stats")
async def get_project_stats(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(task_service.get_stats(user_id, project_id=project_id))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error computing stats for project %s: %s", project_id, e)
        raise _server_error("retrieve project stats")


@router.get("/projects/{project_id}/sub-projects")
async def get_sub_projects(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        children = project_service.get_sub_projects(project_id, user_id)
        return create_data_response(
            {"projects": [ProjectResponse.model_validate(p) for p in children]}
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error listing sub-projects of %s: %s", project_id, e)
        raise _server_error("retrieve sub-projects")


@router.get("/projects/{project_id}/path")
async def get_project_path(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    project_service: ProjectService = Depends(get_project_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        path = project_service.get_project_path(project_id, user_id)
        return create_data_response({"path": [ProjectResponse.model_validate(p) for p in path]})
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error resolving path of project %s: %s", project_id, e)
        raise _server_error("retrieve project path")


@router.get("/projects/{project_id}/tasks")
async def list_project_tasks(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        tasks = task_service.list_project_tasks(project_id, user_id)
        return create_data_response({"tasks": [TaskResponse.model_validate(t) for t in tasks]})
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        log.error("Error listing tasks of project %s: %s", project_id, e)
        raise _server_error("retrieve project tasks")


@router.post("/projects/{project_id}/tasks", status_code=status.HTTP_201_CREATED)
async def create_project_task(
    project_id: str,
    request: CreateTaskRequest,
    user: CurrentUser = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        task = task_service.create_task(project_id, user_id, request.model_dump(exclude_unset=True))
        return create_data_response(
            TaskResponse.model_validate(task), message="Task created successfully"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        log.warning("Validation error creating task in project %s: %s", project_id, e)
        raise _bad_request(e)
    except Exception as e:
        log.error("Error creating task in project %s: %s", project_id, e)
        raise _server_error("create task")

"""
Project member endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...shared.api import DataResponse, create_data_response
from ...shared.auth import get_current_user
from ...shared.exceptions import WebUIBackendException
from ...shared.utils import CurrentUser
from ..dependencies import get_project_member_service
from ..services.project_member_service import ProjectMemberService
from .dto.requests.project_requests import (
    AddMemberRequest,
    BatchAddMembersRequest,
    UpdateMemberRoleRequest,
)
from .dto.responses.project_responses import ProjectMemberResponse
from .dto.responses.user_responses import UserSummaryResponse

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/projects/{project_id}/members")
async def list_members(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    member_service: ProjectMemberService = Depends(get_project_member_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        members = member_service.list_members(project_id, user_id)
        return create_data_response(
            {"members": [ProjectMemberResponse.model_validate(m) for m in members]}
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error listing members of project %s: %s", project_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve project members",
        )


@router.get("/projects/{project_id}/members/stats")
async def get_member_stats(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    member_service: ProjectMemberService = Depends(get_project_member_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(member_service.get_member_stats(project_id, user_id))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error computing member stats for project %s: %s", project_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve member stats",
        )


@router.get("/projects/{project_id}/members/search")
async def search_users(
    project_id: str,
    q: Optional[str] = Query(None),
    user: CurrentUser = Depends(get_current_user),
    member_service: ProjectMemberService = Depends(get_project_member_service),
) -> DataResponse:
    """Users matching ``q`` by email or display name who are not yet in the project."""
    user_id = user.get("id")
    try:
        users = member_service.search_users(project_id, user_id, q)
        return create_data_response(
            {"users": [UserSummaryResponse.model_validate(u, from_attributes=True) for u in users]}
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error searching users for project %s: %s", project_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to search users",
        )


@router.get("/projects/{project_id}/members/recent")
async def recent_members(
    project_id: str,
    user: CurrentUser = Depends(get_current_user),
    member_service: ProjectMemberService = Depends(get_project_member_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        members = member_service.recent_members(project_id, user_id)
        return create_data_response(
            {"members": [ProjectMemberResponse.model_validate(m) for m in members]}
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error listing recent members of project %s: %s", project_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve recent members",
        )


@router.post("/projects/{project_id}/members", status_code=status.HTTP_201_CREATED)
async def add_member(
    project_id: str,
    request: AddMemberRequest,
    user: CurrentUser = Depends(get_current_user),
    member_service: ProjectMemberService = Depends(get_project_member_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        member = member_service.add_member(project_id, user_id, request.user_id, request.role)
        return create_data_response(
            ProjectMemberResponse.model_validate(member), message="Member added successfully"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error adding member to project %s: %s", project_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add member",
        )


@router.post("/projects/{project_id}/members/batch", status_code=status.HTTP_201_CREATED)
async def add_members_batch(
    project_id: str,
    request: BatchAddMembersRequest,
    user: CurrentUser = Depends(get_current_user),
    member_service: ProjectMemberService = Depends(get_project_member_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        added = member_service.add_members_batch(project_id, user_id, request.user_ids, request.role)
        return create_data_response(
            {"members": [ProjectMemberResponse.model_validate(m) for m in added]},
            message=f"Added {len(added)} members",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error batch adding members to project %s: %s", project_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add members",
        )


@router.put("/projects/{project_id}/members/{member_id}")
async def update_member_role(
    project_id: str,
    member_id: str,
    request: UpdateMemberRoleRequest,
    user: CurrentUser = Depends(get_current_user),
    member_service: ProjectMemberService = Depends(get_project_member_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        member = member_service.update_member_role(project_id, user_id, member_id, request.role)
        return create_data_response(
            ProjectMemberResponse.model_validate(member), message="Member role updated successfully"
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error updating member %s in project %s: %s", member_id, project_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update member role",
        )


@router.delete("/projects/{project_id}/members/{member_id}")
async def remove_member(
    project_id: str,
    member_id: str,
    user: CurrentUser = Depends(get_current_user),
    member_service: ProjectMemberService = Depends(get_project_member_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        member_service.remove_member(project_id, user_id, member_id)
        return create_data_response(message="Member removed successfully")
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error removing member %s from project %s: %s", member_id, project_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove member",
        )

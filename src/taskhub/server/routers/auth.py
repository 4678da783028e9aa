"""
Authentication and profile endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...shared.api import DataResponse, create_data_response
from ...shared.auth import TokenManager, get_current_user
from ...shared.exceptions import WebUIBackendException
from ...shared.utils import CurrentUser
from ..dependencies import get_token_manager, get_user_service
from ..services.user_service import UserService
from .dto.requests.user_requests import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
)
from .dto.responses.user_responses import AuthResponse, UserResponse

log = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    user_service: UserService = Depends(get_user_service),
    token_manager: TokenManager = Depends(get_token_manager),
) -> DataResponse:
    """Create a local account and return it with an access token."""
    try:
        user, token = user_service.register(
            token_manager,
            username=request.username,
            email=request.email,
            password=request.password,
        )
        return create_data_response(
            AuthResponse(user=UserResponse.model_validate(user), token=token),
            message="User registered successfully",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        log.warning("Registration rejected: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error registering user: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register user",
        )


@router.post("/auth/login")
async def login(
    request: LoginRequest,
    user_service: UserService = Depends(get_user_service),
    token_manager: TokenManager = Depends(get_token_manager),
) -> DataResponse:
    try:
        user, token = user_service.login(token_manager, request.email, request.password)
        return create_data_response(
            AuthResponse(user=UserResponse.model_validate(user), token=token),
            message="Login successful",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error during login: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to log in",
        )


@router.get("/auth/me")
async def get_me(user: CurrentUser = Depends(get_current_user)) -> DataResponse:
    return create_data_response({"user": UserResponse.model_validate(user)})


@router.put("/auth/profile")
async def update_profile(
    request: UpdateProfileRequest,
    user: CurrentUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        updated = user_service.update_profile(user_id, request.username)
        return create_data_response(
            {"user": UserResponse.model_validate(updated)},
            message="Profile updated successfully",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error updating profile for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile",
        )


@router.put("/auth/password")
async def change_password(
    request: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        user_service.change_password(user_id, request.current_password, request.new_password)
        return create_data_response(message="Password changed successfully")
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error changing password for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to change password",
        )

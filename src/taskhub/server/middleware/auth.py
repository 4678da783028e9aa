"""
Authentication middleware.

Resolves the bearer token on every HTTP request and stores the public user
dict on ``request.state.user``. Requests without a usable token pass through
unauthenticated; ``get_current_user`` rejects them on protected routes.
"""

import logging

from fastapi import Request as FastAPIRequest
from starlette.concurrency import run_in_threadpool

from ...shared.auth import extract_access_token
from ...shared.exceptions import AuthenticationError
from .. import dependencies
from ..repository.user_repository import UserRepository
from ..services.user_service import UserService

log = logging.getLogger(__name__)


def _load_user(user_id: str):
    with dependencies.short_lived_session() as db:
        user = UserRepository(db).find_by_id(user_id)
        return user.to_public_dict() if user else None


def _load_default_user():
    with dependencies.short_lived_session() as db:
        return UserService(UserRepository(db)).get_or_create_default_user().to_public_dict()


def create_auth_middleware(config):
    """
    Build the auth middleware class bound to the application configuration.

    Args:
        config: AppConfig; ``allow_default_user`` serves anonymous requests
            as the built-in default user

    Returns:
        ASGI middleware class taking ``(app, config)``
    """
    allow_default_user = bool(config.get("allow_default_user", False))

    class AuthMiddleware:
        def __init__(self, app, config=None):
            self.app = app
            self.config = config

        async def __call__(self, scope, receive, send):
            if scope["type"] != "http":
                await self.app(scope, receive, send)
                return

            request = FastAPIRequest(scope, receive)
            state = scope.setdefault("state", {})

            token = extract_access_token(request)
            if token:
                try:
                    payload = dependencies.get_token_manager().verify_token(token)
                    user = await run_in_threadpool(_load_user, payload["userId"])
                    if user:
                        state["user"] = user
                    else:
                        log.debug("AuthMiddleware: token refers to unknown user %s", payload["userId"])
                        state["auth_error"] = "User not found"
                except AuthenticationError as e:
                    log.debug("AuthMiddleware: %s for %s", e.message, request.url.path)
                    state["auth_error"] = e.message

            if "user" not in state and allow_default_user:
                state["user"] = await run_in_threadpool(_load_default_user)
                state.pop("auth_error", None)
                log.debug("AuthMiddleware: serving %s as the default user", request.url.path)

            await self.app(scope, receive, send)

    return AuthMiddleware

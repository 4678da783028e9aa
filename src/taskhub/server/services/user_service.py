"""
Business service for user accounts and authentication.
"""

import logging
from typing import Optional, Tuple

from ...shared.auth import TokenManager, hash_password, validate_password, verify_password
from ...shared.exceptions import (
    AuthenticationError,
    EntityNotFoundError,
    ValidationError,
)
from ..repository.entities.user import User
from ..repository.interfaces import IUserRepository

DEFAULT_USER_EMAIL = "admin@localhost"
DEFAULT_USER_PASSWORD = "admin123"
DEFAULT_USER_DISPLAY_NAME = "Admin"


class UserService:
    """Service layer for registration, login and profile management."""

    def __init__(self, user_repository: IUserRepository):
        self.user_repository = user_repository
        self.logger = logging.getLogger(__name__)

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.user_repository.find_by_id(user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.user_repository.find_by_email(email)

    def register(
        self,
        token_manager: TokenManager,
        username: str,
        email: str,
        password: str,
    ) -> Tuple[User, str]:
        """
        Create a local account and issue its first token.

        Raises:
            ValidationError: If the email is already registered
        """
        if self.user_repository.find_by_email(email):
            raise ValidationError("Email already registered")

        user = self.user_repository.create(
            email=email,
            password_hash=hash_password(password),
            display_name=username.strip(),
        )
        self.logger.info(f"Registered user {user.id}")
        return user, token_manager.create_token(user.id, user.email)

    def login(self, token_manager: TokenManager, email: str, password: str) -> Tuple[User, str]:
        user = self.user_repository.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            self.logger.info("Failed login attempt")
            raise AuthenticationError("Invalid email or password")
        return user, token_manager.create_token(user.id, user.email)

    def update_profile(self, user_id: str, username: Optional[str]) -> User:
        if not username or not username.strip():
            raise ValidationError("Username cannot be empty")
        user = self.user_repository.update(user_id, {"display_name": username.strip()})
        if not user:
            raise EntityNotFoundError("User", user_id)
        return user

    def change_password(
        self, user_id: str, current_password: Optional[str], new_password: Optional[str]
    ) -> None:
        """
        Replace a user's password after checking the current one.

        Raises:
            ValidationError: If a field is missing, the current password is wrong
                or the new password fails the strength rules
        """
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")

        user = self.user_repository.find_by_id(user_id)
        if not user:
            raise EntityNotFoundError("User", user_id)
        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        is_valid, errors = validate_password(new_password)
        if not is_valid:
            raise ValidationError("Password does not meet requirements", errors=errors)

        self.user_repository.update_password(user_id, hash_password(new_password))
        self.logger.info(f"Password changed for user {user_id}")

    def update_user(self, user_id: str, update_data: dict) -> Optional[User]:
        return self.user_repository.update(user_id, update_data)

    def delete_user(self, user_id: str) -> bool:
        return self.user_repository.delete(user_id)

    def get_or_create_default_user(self) -> User:
        """Return the built-in default user, creating it on first use."""
        user = self.user_repository.find_by_email(DEFAULT_USER_EMAIL)
        if user:
            return user
        self.logger.warning("Creating default user %s", DEFAULT_USER_EMAIL)
        return self.user_repository.create(
            email=DEFAULT_USER_EMAIL,
            password_hash=hash_password(DEFAULT_USER_PASSWORD),
            display_name=DEFAULT_USER_DISPLAY_NAME,
        )

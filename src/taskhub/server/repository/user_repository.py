"""
Repository implementation for user accounts.
"""

import uuid
from typing import List, Optional, Sequence

from sqlalchemy import func, or_
from sqlalchemy.orm import Session as DBSession

from ...shared import now_epoch_ms
from .entities.user import User
from .interfaces import IUserRepository
from .models import UserModel


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of user repository."""

    def __init__(self, db: DBSession):
        self.db = db

    def find_by_id(self, user_id: str) -> Optional[User]:
        model = self.db.query(UserModel).filter(UserModel.id == user_id).first()
        return self._model_to_entity(model) if model else None

    def find_by_email(self, email: str) -> Optional[User]:
        model = (
            self.db.query(UserModel)
            .filter(func.lower(UserModel.email) == email.strip().lower())
            .first()
        )
        return self._model_to_entity(model) if model else None

    def find_by_ids(self, user_ids: Sequence[str]) -> List[User]:
        if not user_ids:
            return []
        models = self.db.query(UserModel).filter(UserModel.id.in_(list(user_ids))).all()
        return [self._model_to_entity(m) for m in models]

    def create(
        self,
        email: str,
        password_hash: str,
        display_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        auth_provider: str = "local",
    ) -> User:
        now = now_epoch_ms()
        model = UserModel(
            id=str(uuid.uuid4()),
            email=email.strip().lower(),
            password_hash=password_hash,
            auth_provider=auth_provider,
            display_name=display_name,
            avatar_url=avatar_url,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def update(self, user_id: str, update_data: dict) -> Optional[User]:
        model = self.db.query(UserModel).filter(UserModel.id == user_id).first()
        if not model:
            return None

        for field in ("display_name", "avatar_url"):
            if field in update_data:
                setattr(model, field, update_data[field])

        model.updated_at = now_epoch_ms()
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_entity(model)

    def update_password(self, user_id: str, password_hash: str) -> bool:
        result = (
            self.db.query(UserModel)
            .filter(UserModel.id == user_id)
            .update({"password_hash": password_hash, "updated_at": now_epoch_ms()})
        )
        self.db.commit()
        return result > 0

    def delete(self, user_id: str) -> bool:
        result = self.db.query(UserModel).filter(UserModel.id == user_id).delete()
        self.db.commit()
        return result > 0

    def search(self, query: str, exclude_ids: Sequence[str] = (), limit: int = 10) -> List[User]:
        """Case-insensitive search on email or display name."""
        pattern = f"%{query.strip().lower()}%"
        q = self.db.query(UserModel).filter(
            or_(
                func.lower(UserModel.email).like(pattern),
                func.lower(UserModel.display_name).like(pattern),
            )
        )
        if exclude_ids:
            q = q.filter(UserModel.id.notin_(list(exclude_ids)))
        models = q.order_by(UserModel.email.asc()).limit(limit).all()
        return [self._model_to_entity(m) for m in models]

    def _model_to_entity(self, model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            auth_provider=model.auth_provider or "local",
            display_name=model.display_name,
            avatar_url=model.avatar_url,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

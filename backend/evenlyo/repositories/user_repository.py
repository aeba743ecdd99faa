# backend/evenlyo/repositories/user_repository.py
"""User repository."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.user import User, UserRole
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_active(self, user_id: str) -> Optional[User]:
        return self.find_one_by(id=user_id, is_active=True)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email.strip().lower())

    def list_active_admins(self) -> List[User]:
        return self.find_by(role=UserRole.ADMIN.value, is_active=True)

import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from models.enums import UserRole
from models.models import User

from .base_repo import CommitMixin


class ProfileRepo(CommitMixin):
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalars().first()

    async def list_all(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def list_admins(self) -> List[User]:
        result = await self.db.execute(
            select(User).where(User.role == UserRole.ADMIN, User.inactive == 0)
        )
        return list(result.scalars().all())

    async def create(self, **data) -> User:
        """Insert a profile; a unique-constraint clash propagates as IntegrityError."""
        user = User(**data)
        self.db.add(user)
        try:
            await self.db.commit()
            return user
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def stage(self, user: User, **values) -> User:
        for key, value in values.items():
            setattr(user, key, value)
        await self.db.flush()
        return user

import uuid
from typing import List, Optional

from sqlalchemy import delete, select, update

from models.enums import NotificationType
from models.models import Notification

from .base_repo import CommitMixin


class NotificationRepo(CommitMixin):
    def __init__(self, db):
        self.db = db

    async def create(
        self,
        user_id: uuid.UUID,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        link: str = "/",
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            link=link or "/",
            is_read=False,
        )
        self.db.add(notification)
        await self.db.flush()
        return notification

    async def list_all(self) -> List[Notification]:
        result = await self.db.execute(
            select(Notification).order_by(Notification.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_user(self, user_id: uuid.UUID) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
        )
        return list(result.scalars().all())

    async def find_unread(self, title: str, link: str) -> Optional[Notification]:
        result = await self.db.execute(
            select(Notification).where(
                Notification.title == title,
                Notification.link == link,
                Notification.is_read.is_(False),
            )
        )
        return result.scalars().first()

    async def mark_read(self, notification_id: uuid.UUID, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        await self.db_commit()
        return result.rowcount

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        await self.db_commit()
        return result.rowcount

    async def delete_for_user(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            delete(Notification)
            .where(Notification.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        await self.db_commit()
        return result.rowcount

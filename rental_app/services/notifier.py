import logging
import uuid
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from models.enums import NotificationType
from models.models import Notification
from repos.notification_repo import NotificationRepo

logger = logging.getLogger(__name__)


class Notifier:
    """Writes persisted notifications after a transition has committed.

    Inserts run inside a savepoint, so a failed insert is dropped without
    expiring anything the caller still holds.
    """

    def __init__(self, db):
        self.db = db
        self.repo: NotificationRepo = NotificationRepo(db)

    async def send(
        self,
        user_id: uuid.UUID,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        link: str = "/",
    ) -> Optional[Notification]:
        try:
            async with self.db.begin_nested():
                notification = await self.repo.create(
                    user_id=user_id, title=title, message=message, type=type, link=link
                )
            await self.repo.db_commit()
            return notification
        except SQLAlchemyError:
            logger.exception("Failed to create notification %r for user %s", title, user_id)
            return None

    async def send_many(
        self,
        user_ids,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        link: str = "/",
    ) -> int:
        try:
            async with self.db.begin_nested():
                for user_id in user_ids:
                    await self.repo.create(
                        user_id=user_id, title=title, message=message, type=type, link=link
                    )
            await self.repo.db_commit()
        except SQLAlchemyError:
            logger.exception("Failed to fan out notification %r", title)
            return 0
        return len(user_ids)

import logging
import uuid
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from core.cache import Cache
from core.errors import PersistenceError
from models.enums import FeedItemKind
from repos.notification_repo import NotificationRepo
from repos.notification_state_repo import NotificationStateRepo
from services.data_repository import DataRepository
from services.notification_feed import FeedItem, build_feed, unread_count

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db, cache: Cache | None = None):
        self.db = db
        self.repo: NotificationRepo = NotificationRepo(db)
        self.state: NotificationStateRepo = NotificationStateRepo(cache)
        self.data: DataRepository = DataRepository(db)

    async def get_feed(self, current_user) -> List[FeedItem]:
        snapshot = await self.data.refresh()
        if not snapshot.complete:
            await self.db.refresh(current_user)
            logger.warning(
                "Feed for %s built without: %s",
                current_user.id,
                ", ".join(snapshot.failed),
            )
        read_ids = await self.state.get_read(current_user.id)
        dismissed_ids = await self.state.get_dismissed(current_user.id)
        return build_feed(
            current_user,
            persisted=snapshot.notifications,
            bills=snapshot.bills,
            applications=snapshot.applications,
            properties=snapshot.properties,
            bookings=snapshot.bookings,
            users=snapshot.users,
            read_ids=read_ids,
            dismissed_ids=dismissed_ids,
        )

    async def unread_count(self, current_user) -> int:
        return unread_count(await self.get_feed(current_user))

    async def mark_as_read(self, current_user, notification_id: str) -> None:
        notification_id = str(notification_id)
        await self.state.add_read(current_user.id, [notification_id])

        try:
            persisted_id = uuid.UUID(notification_id)
        except ValueError:
            return

        try:
            await self.repo.mark_read(persisted_id, current_user.id)
        except SQLAlchemyError:
            logger.exception(
                "Failed to persist read flag for notification %s", notification_id
            )

    async def mark_all_as_read(self, current_user) -> int:
        feed = await self.get_feed(current_user)
        await self.state.add_read(current_user.id, [item.id for item in feed])

        try:
            await self.repo.mark_all_read(current_user.id)
        except SQLAlchemyError:
            logger.exception("Failed to persist read flags for %s", current_user.id)
        return len(feed)

    async def clear_notifications(self, current_user) -> int:
        feed = await self.get_feed(current_user)
        visible_ids = [item.id for item in feed]
        persisted_ids = [
            item.id for item in feed if item.kind == FeedItemKind.PERSISTED
        ]
        for row in await self.repo.list_for_user(current_user.id):
            if str(row.id) not in persisted_ids:
                persisted_ids.append(str(row.id))

        await self.state.add_dismissed(current_user.id, visible_ids)

        try:
            await self.repo.delete_for_user(current_user.id)
        except SQLAlchemyError as e:
            logger.exception("Failed to clear notifications for %s", current_user.id)
            raise PersistenceError("Could not clear notifications.") from e

        await self.state.remove_read(current_user.id, persisted_ids)
        return len(visible_ids)

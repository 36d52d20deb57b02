import logging
from dataclasses import dataclass, field
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from models.models import Application, Bill, Booking, Notification, Property, User
from repos.application_repo import ApplicationRepo
from repos.bill_repo import BillRepo
from repos.booking_repo import BookingRepo
from repos.notification_repo import NotificationRepo
from repos.profile_repo import ProfileRepo
from repos.property_repo import PropertyRepo

logger = logging.getLogger(__name__)


@dataclass
class DataSnapshot:
    properties: List[Property] = field(default_factory=list)
    bills: List[Bill] = field(default_factory=list)
    bookings: List[Booking] = field(default_factory=list)
    users: List[User] = field(default_factory=list)
    applications: List[Application] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed


class DataRepository:
    """Loads every collection the feed and dashboards read in one pass.

    A collection that fails to load is logged and left empty so a partial
    refresh never hides the caller's own result.
    """

    def __init__(self, db):
        self.db = db
        self.loaders = {
            "properties": PropertyRepo(db).list_all,
            "bills": BillRepo(db).list_all,
            "bookings": BookingRepo(db).list_all,
            "users": ProfileRepo(db).list_all,
            "applications": ApplicationRepo(db).list_all,
            "notifications": NotificationRepo(db).list_all,
        }

    async def _load(self, snapshot: DataSnapshot, name: str) -> bool:
        try:
            setattr(snapshot, name, await self.loaders[name]())
            return True
        except SQLAlchemyError:
            logger.exception("Failed to load %s", name)
            await self.db.rollback()
            setattr(snapshot, name, [])
            return False

    async def refresh(self) -> DataSnapshot:
        snapshot = DataSnapshot()
        loaded: List[str] = []
        for name in self.loaders:
            if await self._load(snapshot, name):
                loaded.append(name)
                continue
            snapshot.failed.append(name)
            # rollback expired every row loaded so far
            for earlier in list(loaded):
                if not await self._load(snapshot, earlier):
                    loaded.remove(earlier)
                    snapshot.failed.append(earlier)
        return snapshot

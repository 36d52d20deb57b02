from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from models.enums import BillStatus, UserRole
from models.models import Notification
from repos.notification_state_repo import DISMISSED_KEY, READ_KEY
from services.notification_feed import OVERDUE_BILLS_ID
from services.notification_service import NotificationService
from services.notifier import Notifier


@pytest.fixture
async def household(make_user, make_property, make_bill):
    owner = await make_user(role=UserRole.OWNER)
    renter = await make_user()
    prop = await make_property(owner)
    await make_bill(prop, renter, status=BillStatus.OVERDUE, due_date=date(2025, 12, 1))
    return owner, renter


async def test_feed_merges_persisted_and_synthetic(db, cache, household):
    _, renter = household
    note = await Notifier(db).send(renter.id, "Welcome", "Glad to have you")

    feed = await NotificationService(db, cache=cache).get_feed(renter)

    assert {item.id for item in feed} == {str(note.id), OVERDUE_BILLS_ID}


async def test_mark_as_read_persists_and_records_state(db, cache, household):
    _, renter = household
    note = await Notifier(db).send(renter.id, "Welcome", "Glad to have you")
    service = NotificationService(db, cache=cache)

    await service.mark_as_read(renter, str(note.id))
    await service.mark_as_read(renter, OVERDUE_BILLS_ID)

    is_read = (
        await db.execute(select(Notification.is_read).where(Notification.id == note.id))
    ).scalar_one()
    assert is_read is True
    assert set(cache.store[READ_KEY.format(user_id=renter.id)]) == {
        str(note.id),
        OVERDUE_BILLS_ID,
    }
    assert await service.unread_count(renter) == 0


async def test_mark_all_as_read(db, cache, household):
    _, renter = household
    await Notifier(db).send(renter.id, "Welcome", "Glad to have you")
    service = NotificationService(db, cache=cache)

    assert await service.unread_count(renter) == 2
    assert await service.mark_all_as_read(renter) == 2
    assert await service.unread_count(renter) == 0
    unread_rows = (
        await db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == renter.id, Notification.is_read.is_(False)
            )
        )
    ).scalar_one()
    assert unread_rows == 0


async def test_clear_only_touches_the_caller(db, cache, household):
    owner, renter = household
    notifier = Notifier(db)
    await notifier.send(renter.id, "Welcome", "Glad to have you")
    await notifier.send(owner.id, "Heads up", "Something happened")
    service = NotificationService(db, cache=cache)

    cleared = await service.clear_notifications(renter)

    assert cleared == 2
    assert await service.get_feed(renter) == []
    assert OVERDUE_BILLS_ID in cache.store[DISMISSED_KEY.format(user_id=renter.id)]

    remaining = (
        await db.execute(
            select(Notification.user_id, func.count(Notification.id)).group_by(
                Notification.user_id
            )
        )
    ).all()
    assert [(row[0], row[1]) for row in remaining] == [(owner.id, 1)]
    assert len(await service.get_feed(owner)) == 1


async def test_state_store_failure_degrades_to_unread(db, household):
    class BrokenCache:
        async def get_json(self, key):
            raise ConnectionError("cache down")

        async def set_json(self, key, value, ttl=None):
            raise ConnectionError("cache down")

    _, renter = household
    service = NotificationService(db, cache=BrokenCache())

    await service.mark_as_read(renter, OVERDUE_BILLS_ID)

    feed = await service.get_feed(renter)
    assert [item.id for item in feed] == [OVERDUE_BILLS_ID]
    assert feed[0].is_read is False


async def test_failed_collection_leaves_the_rest_of_the_feed(db, cache, household):
    _, renter = household
    service = NotificationService(db, cache=cache)

    async def broken_loader():
        raise SQLAlchemyError("relation does not exist")

    service.data.loaders["applications"] = broken_loader

    snapshot = await service.data.refresh()
    assert snapshot.failed == ["applications"]
    assert snapshot.complete is False

    feed = await service.get_feed(renter)
    assert [item.id for item in feed] == [OVERDUE_BILLS_ID]


async def test_failed_insert_leaves_loaded_rows_usable(
    db, household, failing_notification_insert
):
    owner, renter = household
    notifier = Notifier(db)

    assert await notifier.send(renter.id, "Welcome", "Glad to have you") is None
    assert await notifier.send_many([owner.id, renter.id], "Heads up", "Hi") == 0

    assert renter.role == UserRole.RENTER
    assert owner.role == UserRole.OWNER
    count = (await db.execute(select(func.count(Notification.id)))).scalar_one()
    assert count == 0

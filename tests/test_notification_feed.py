import uuid
from datetime import date, datetime, timezone
from types import SimpleNamespace

from models.enums import (
    ApplicationStatus,
    BillStatus,
    FeedItemKind,
    NotificationType,
    UserRole,
)
from services.notification_feed import (
    EXPIRING_LEASE_ID,
    OVERDUE_BILLS_ID,
    build_feed,
    unread_count,
)

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def user(role=UserRole.RENTER, name="Test User"):
    return SimpleNamespace(id=uuid.uuid4(), role=role, full_name=name)


def bill(renter, status, due):
    return SimpleNamespace(
        id=uuid.uuid4(),
        renter_id=renter.id,
        status=status,
        due_date=due,
        created_at=NOW,
    )


def notification(owner, title="Hello", is_read=False):
    return SimpleNamespace(
        id=uuid.uuid4(),
        user_id=owner.id,
        title=title,
        message="message",
        type=NotificationType.INFO,
        link="/",
        is_read=is_read,
        created_at=NOW,
    )


def prop(owner, title="Palm Court"):
    return SimpleNamespace(id=uuid.uuid4(), owner_id=owner.id, title=title)


def booking(prop_obj, end_date, is_active=True):
    return SimpleNamespace(
        id=uuid.uuid4(),
        property_id=prop_obj.id,
        is_active=is_active,
        end_date=end_date,
    )


def application(prop_obj, renter, status):
    return SimpleNamespace(
        id=uuid.uuid4(),
        property_id=prop_obj.id,
        renter_id=renter.id,
        status=status,
        created_at=NOW,
    )


class TestRenterFeed:
    def test_overdue_bills_suppress_pending_reminder(self):
        renter = user()
        bills = [
            bill(renter, BillStatus.OVERDUE, date(2025, 12, 1)),
            bill(renter, BillStatus.PENDING, date(2026, 2, 1)),
        ]

        feed = build_feed(renter, bills=bills, now=NOW)

        assert [item.id for item in feed] == [OVERDUE_BILLS_ID]
        assert feed[0].type == NotificationType.ALERT
        assert feed[0].message == "You have 1 overdue bill(s)."

    def test_pending_reminder_keys_on_earliest_due_bill(self):
        renter = user()
        later = bill(renter, BillStatus.PENDING, date(2026, 3, 1))
        sooner = bill(renter, BillStatus.PENDING, date(2026, 2, 1))

        feed = build_feed(renter, bills=[later, sooner], now=NOW)

        assert [item.id for item in feed] == [f"pending-{sooner.id}"]
        assert feed[0].message == "You have 2 pending bill(s) due soon."

    def test_other_renters_bills_are_ignored(self):
        renter = user()
        stranger = user()
        feed = build_feed(
            renter, bills=[bill(stranger, BillStatus.OVERDUE, date(2025, 1, 1))]
        )
        assert feed == []

    def test_decided_applications_surface(self):
        owner = user(UserRole.OWNER)
        renter = user()
        listing = prop(owner, "Palm Court")
        apps = [
            application(listing, renter, ApplicationStatus.APPROVED),
            application(listing, renter, ApplicationStatus.PENDING),
        ]

        feed = build_feed(renter, applications=apps, properties=[listing], now=NOW)

        assert [item.id for item in feed] == [f"app-{apps[0].id}"]
        assert feed[0].message == "Your application for Palm Court was approved."
        assert feed[0].type == NotificationType.SUCCESS


class TestOwnerFeed:
    def test_pending_applications_appear_as_new(self):
        owner = user(UserRole.OWNER)
        renter = user(name="Kemi")
        listing = prop(owner, "Palm Court")
        app = application(listing, renter, ApplicationStatus.PENDING)

        feed = build_feed(
            owner,
            applications=[app],
            properties=[listing],
            users=[renter],
            now=NOW,
        )

        assert [item.id for item in feed] == [f"new-app-{app.id}"]
        assert feed[0].message == "Kemi applied for Palm Court."
        assert feed[0].link == f"/applications?reviewId={app.id}"

    def test_expiring_lease_window(self):
        owner = user(UserRole.OWNER)
        listing = prop(owner)
        inside = [
            booking(listing, date(2026, 1, 31)),
            booking(listing, date(2026, 1, 1)),
        ]
        outside = [
            booking(listing, date(2026, 2, 1)),
            booking(listing, date(2025, 12, 31)),
            booking(listing, date(2026, 1, 10), is_active=False),
            booking(listing, None),
        ]

        feed = build_feed(
            owner, properties=[listing], bookings=inside + outside, now=NOW
        )

        assert [item.id for item in feed] == [EXPIRING_LEASE_ID]
        assert feed[0].source["ids"] == [str(b.id) for b in inside]

    def test_other_owners_bookings_do_not_count(self):
        owner = user(UserRole.OWNER)
        other_listing = prop(user(UserRole.OWNER))
        feed = build_feed(
            owner,
            properties=[other_listing],
            bookings=[booking(other_listing, date(2026, 1, 5))],
            now=NOW,
        )
        assert feed == []


class TestReadAndDismiss:
    def test_dismissed_items_are_hidden(self):
        renter = user()
        feed = build_feed(
            renter,
            bills=[bill(renter, BillStatus.OVERDUE, date(2025, 12, 1))],
            dismissed_ids={OVERDUE_BILLS_ID},
        )
        assert feed == []

    def test_unread_items_sort_first_and_keep_order(self):
        renter = user()
        first = notification(renter, "first", is_read=True)
        second = notification(renter, "second")
        third = notification(renter, "third")

        feed = build_feed(
            renter,
            persisted=[first, second, third],
            bills=[bill(renter, BillStatus.OVERDUE, date(2025, 12, 1))],
            read_ids={str(third.id)},
        )

        assert [item.id for item in feed] == [
            str(second.id),
            OVERDUE_BILLS_ID,
            str(first.id),
            str(third.id),
        ]
        assert unread_count(feed) == 2
        assert feed[0].kind == FeedItemKind.PERSISTED
        assert feed[1].kind == FeedItemKind.SYNTHETIC

    def test_persisted_rows_of_other_users_are_skipped(self):
        renter = user()
        feed = build_feed(renter, persisted=[notification(user())])
        assert feed == []

    def test_admin_sees_only_persisted(self):
        admin = user(UserRole.ADMIN)
        note = notification(admin)
        feed = build_feed(
            admin,
            persisted=[note],
            bills=[bill(admin, BillStatus.OVERDUE, date(2025, 12, 1))],
        )
        assert [item.id for item in feed] == [str(note.id)]

    def test_no_user_gets_empty_feed(self):
        assert build_feed(None) == []

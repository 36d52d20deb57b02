from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from core.errors import PermissionDeniedError, ValidationError
from models.enums import BillStatus, BillType, PropertyStatus, UserRole
from models.models import Notification, Property
from services.bill_service import BillService
from services.booking_service import BookingService


@pytest.fixture
async def parties(make_user, make_property):
    owner = await make_user(role=UserRole.OWNER)
    renter = await make_user()
    prop = await make_property(owner, title="Creek House")
    return owner, renter, prop


def booking_data(prop, renter, **overrides):
    data = {
        "property_id": prop.id,
        "renter_id": renter.id,
        "start_date": date(2026, 5, 1),
        "end_date": date(2027, 5, 1),
        "is_active": True,
    }
    data.update(overrides)
    return data


class TestBookings:
    async def test_active_booking_occupies_property(self, db, parties, publisher):
        owner, renter, prop = parties

        booking = await BookingService(db, publisher=publisher).add_booking(
            owner,
            booking_data(
                prop,
                renter,
                occupants=[{"name": "Ada", "relationship_to_renter": "sister"}],
            ),
        )

        assert [o.name for o in booking.occupants] == ["Ada"]
        stored = (
            await db.execute(select(Property).where(Property.id == prop.id))
        ).scalar_one()
        assert stored.status == PropertyStatus.OCCUPIED
        assert stored.current_renter_id == renter.id
        assert stored.lease_end_date == date(2027, 5, 1)
        assert publisher.names() == ["booking.created"]

    async def test_second_active_booking_is_refused(
        self, db, parties, make_user, publisher
    ):
        owner, renter, prop = parties
        other = await make_user()
        service = BookingService(db, publisher=publisher)
        await service.add_booking(owner, booking_data(prop, renter))

        with pytest.raises(ValidationError):
            await service.add_booking(owner, booking_data(prop, other))

    async def test_update_replaces_occupants_and_releases(self, db, parties, publisher):
        owner, renter, prop = parties
        service = BookingService(db, publisher=publisher)
        booking = await service.add_booking(
            owner, booking_data(prop, renter, occupants=[{"name": "Ada"}])
        )

        result = await service.update_booking(
            owner,
            booking.id,
            {"occupants": [{"name": "Bo"}, {"name": "Cy"}], "is_active": False},
        )

        assert sorted(o.name for o in result.occupants) == ["Bo", "Cy"]
        assert result.is_active is False
        stored = (
            await db.execute(select(Property).where(Property.id == prop.id))
        ).scalar_one()
        assert stored.status == PropertyStatus.AVAILABLE
        assert stored.current_renter_id is None

    async def test_renter_cannot_create_booking(self, db, parties, publisher):
        _, renter, prop = parties
        with pytest.raises(PermissionDeniedError):
            await BookingService(db, publisher=publisher).add_booking(
                renter, booking_data(prop, renter)
            )


class TestBills:
    async def test_create_bill_notifies_renter(self, db, parties, publisher):
        owner, renter, prop = parties

        bill = await BillService(db, publisher=publisher).create_bill(
            owner,
            {
                "property_id": prop.id,
                "renter_id": renter.id,
                "type": "Utilities",
                "amount": Decimal("75.50"),
                "due_date": date(2026, 6, 1),
            },
        )

        assert bill.type == BillType.UTILITY
        assert bill.status == BillStatus.PENDING
        titles = (
            await db.execute(
                select(Notification.title).where(Notification.user_id == renter.id)
            )
        ).scalars().all()
        assert titles == ["New Bill"]
        assert publisher.names() == ["bill.created"]

    async def test_renter_pays_own_bill(self, db, parties, make_bill, make_user, publisher):
        _, renter, prop = parties
        bill = await make_bill(prop, renter)
        stranger = await make_user()
        service = BillService(db, publisher=publisher)

        with pytest.raises(PermissionDeniedError):
            await service.pay_bill(stranger, bill.id)

        paid = await service.pay_bill(renter, bill.id)
        assert paid.status == BillStatus.PAID
        assert paid.paid_date is not None

    async def test_mark_overdue_only_touches_past_pending(
        self, db, parties, make_bill, make_user, publisher
    ):
        _, renter, prop = parties
        admin = await make_user(role=UserRole.ADMIN)
        past = await make_bill(prop, renter, due_date=date.today() - timedelta(days=3))
        future = await make_bill(prop, renter, due_date=date.today() + timedelta(days=30))
        await make_bill(
            prop,
            renter,
            status=BillStatus.PAID,
            due_date=date.today() - timedelta(days=10),
        )

        assert await BillService(db, publisher=publisher).mark_overdue_bills(admin) == 1
        assert past.status == BillStatus.OVERDUE
        assert future.status == BillStatus.PENDING

from datetime import date, datetime, timezone

import pytest
from sqlalchemy import select, text

from core.date_helper import calculate_lease_end, days_until
from core.errors import ValidationError
from core.normalizer import (
    normalize_bill_type,
    normalize_property_category,
    normalize_property_status,
)
from core.validate_enum import validate_enum
from models.enums import ApplicationStatus, BillType, PropertyStatus, UserRole
from models.models import Property


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Available", PropertyStatus.AVAILABLE),
        (" rented ", PropertyStatus.OCCUPIED),
        ("LEASED", PropertyStatus.OCCUPIED),
        ("under-maintenance", PropertyStatus.MAINTENANCE),
        ("Under  Maintenance", PropertyStatus.MAINTENANCE),
        ("", PropertyStatus.AVAILABLE),
        (None, PropertyStatus.AVAILABLE),
        ("something odd", PropertyStatus.AVAILABLE),
        (PropertyStatus.OCCUPIED, PropertyStatus.OCCUPIED),
    ],
)
def test_normalize_property_status(raw, expected):
    assert normalize_property_status(raw) is expected


def test_normalize_bill_type():
    assert normalize_bill_type("Utilities") is BillType.UTILITY
    assert normalize_bill_type("RENT") is BillType.RENT
    assert normalize_bill_type("parking") is BillType.OTHER


def test_normalize_property_category():
    assert normalize_property_category("") == "apartment"
    assert normalize_property_category("Boarding House") == "other"
    assert normalize_property_category("Duplex") == "duplex"


def test_validate_enum_accepts_value_or_name():
    assert validate_enum("Approved", ApplicationStatus, field="status") is ApplicationStatus.APPROVED
    assert validate_enum("lease_signed", ApplicationStatus, field="status") is ApplicationStatus.LEASE_SIGNED
    assert validate_enum("owner", UserRole, field="role") is UserRole.OWNER


def test_validate_enum_rejects_unknown():
    with pytest.raises(ValidationError):
        validate_enum("archived", ApplicationStatus, field="status")


def test_lease_end_handles_leap_day():
    assert calculate_lease_end(date(2024, 2, 29)) == date(2025, 2, 28)
    assert calculate_lease_end(date(2026, 3, 1), years=2) == date(2028, 3, 1)


def test_days_until_rounds_up():
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert days_until(date(2026, 1, 31), now) == 30
    assert days_until(date(2026, 2, 1), now) == 31
    assert days_until(date(2025, 12, 31), now) == -1


async def test_legacy_status_is_normalized_on_read(db, make_user, make_property):
    owner = await make_user(role=UserRole.OWNER)
    prop = await make_property(owner)

    await db.execute(
        text("UPDATE properties SET status = 'Rented' WHERE id = :id"),
        {"id": prop.id.hex},
    )
    await db.commit()

    status = (
        await db.execute(select(Property.status).where(Property.id == prop.id))
    ).scalar_one()
    assert status is PropertyStatus.OCCUPIED

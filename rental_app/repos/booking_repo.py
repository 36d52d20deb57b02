import uuid
from typing import List, Optional

from sqlalchemy import select

from models.models import Booking, Occupant

from .base_repo import CommitMixin


class BookingRepo(CommitMixin):
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, booking_id: uuid.UUID) -> Optional[Booking]:
        result = await self.db.execute(select(Booking).where(Booking.id == booking_id))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Booking]:
        result = await self.db.execute(
            select(Booking).order_by(Booking.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_renter(self, renter_id: uuid.UUID) -> List[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(Booking.renter_id == renter_id)
            .order_by(Booking.created_at.desc())
        )
        return list(result.scalars().all())

    async def latest_for_pair(
        self, property_id: uuid.UUID, renter_id: uuid.UUID
    ) -> Optional[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(Booking.property_id == property_id, Booking.renter_id == renter_id)
            .order_by(Booking.is_active.desc(), Booking.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def active_for_property(self, property_id: uuid.UUID) -> List[Booking]:
        result = await self.db.execute(
            select(Booking).where(
                Booking.property_id == property_id, Booking.is_active.is_(True)
            )
        )
        return list(result.scalars().all())

    async def active_for_pair(
        self, property_id: uuid.UUID, renter_id: uuid.UUID
    ) -> List[Booking]:
        result = await self.db.execute(
            select(Booking).where(
                Booking.property_id == property_id,
                Booking.renter_id == renter_id,
                Booking.is_active.is_(True),
            )
        )
        return list(result.scalars().all())

    async def create(self, occupants: List[dict] | None = None, **data) -> Booking:
        booking = Booking(**data)
        booking.occupants = [Occupant(**occupant) for occupant in occupants or []]
        self.db.add(booking)
        await self.db.flush()
        return booking

    async def stage(self, booking: Booking, **values) -> Booking:
        for key, value in values.items():
            setattr(booking, key, value)
        await self.db.flush()
        return booking

    async def replace_occupants(self, booking: Booking, occupants: List[dict]) -> Booking:
        booking.occupants.clear()
        await self.db.flush()
        booking.occupants.extend(Occupant(**occupant) for occupant in occupants)
        await self.db.flush()
        return booking

import uuid
from typing import List, Optional

from sqlalchemy import func, select

from models.enums import PropertyStatus
from models.models import Application, Bill, Booking, Property

from .base_repo import CommitMixin


class PropertyRepo(CommitMixin):
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, property_id: uuid.UUID) -> Optional[Property]:
        result = await self.db.execute(
            select(Property).where(Property.id == property_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Property]:
        result = await self.db.execute(
            select(Property).order_by(Property.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_owner(self, owner_id: uuid.UUID) -> List[Property]:
        result = await self.db.execute(
            select(Property)
            .where(Property.owner_id == owner_id)
            .order_by(Property.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, **data) -> Property:
        property_obj = Property(**data)
        self.db.add(property_obj)
        await self.db.flush()
        return property_obj

    async def stage(self, property_obj: Property, **values) -> Property:
        for key, value in values.items():
            setattr(property_obj, key, value)
        await self.db.flush()
        return property_obj

    async def mark_occupied(
        self,
        property_obj: Property,
        renter_id: uuid.UUID,
        lease_start,
        lease_end,
    ) -> Property:
        return await self.stage(
            property_obj,
            status=PropertyStatus.OCCUPIED,
            current_renter_id=renter_id,
            lease_start_date=lease_start,
            lease_end_date=lease_end,
            reserved_until=lease_end,
        )

    async def release(self, property_obj: Property) -> Property:
        return await self.stage(
            property_obj,
            status=PropertyStatus.AVAILABLE,
            current_renter_id=None,
            lease_start_date=None,
            lease_end_date=None,
            reserved_until=None,
        )

    async def delete(self, property_obj: Property) -> None:
        await self.db.delete(property_obj)
        await self.db.flush()

    async def _references(self, model, property_id: uuid.UUID, sample_size: int):
        count_result = await self.db.execute(
            select(func.count(model.id)).where(model.property_id == property_id)
        )
        count = count_result.scalar_one()

        ids: List[str] = []
        if count:
            id_result = await self.db.execute(
                select(model.id)
                .where(model.property_id == property_id)
                .limit(sample_size)
            )
            ids = [str(row_id) for row_id in id_result.scalars().all()]
        return count, ids

    async def reference_summary(self, property_id: uuid.UUID, sample_size: int = 5):
        bookings_count, booking_ids = await self._references(
            Booking, property_id, sample_size
        )
        bills_count, bill_ids = await self._references(Bill, property_id, sample_size)
        applications_count, application_ids = await self._references(
            Application, property_id, sample_size
        )
        return {
            "bookings_count": bookings_count,
            "bills_count": bills_count,
            "applications_count": applications_count,
            "booking_ids": booking_ids,
            "bill_ids": bill_ids,
            "application_ids": application_ids,
        }

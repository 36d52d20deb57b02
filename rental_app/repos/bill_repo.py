import uuid
from typing import List, Optional

from sqlalchemy import select

from models.models import Bill

from .base_repo import CommitMixin


class BillRepo(CommitMixin):
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, bill_id: uuid.UUID) -> Optional[Bill]:
        result = await self.db.execute(select(Bill).where(Bill.id == bill_id))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Bill]:
        result = await self.db.execute(select(Bill).order_by(Bill.due_date))
        return list(result.scalars().all())

    async def list_for_renter(self, renter_id: uuid.UUID) -> List[Bill]:
        result = await self.db.execute(
            select(Bill).where(Bill.renter_id == renter_id).order_by(Bill.due_date)
        )
        return list(result.scalars().all())

    async def list_for_property(self, property_id: uuid.UUID) -> List[Bill]:
        result = await self.db.execute(
            select(Bill).where(Bill.property_id == property_id).order_by(Bill.due_date)
        )
        return list(result.scalars().all())

    async def create(self, **data) -> Bill:
        bill = Bill(**data)
        self.db.add(bill)
        await self.db.flush()
        return bill

    async def stage(self, bill: Bill, **values) -> Bill:
        for key, value in values.items():
            setattr(bill, key, value)
        await self.db.flush()
        return bill

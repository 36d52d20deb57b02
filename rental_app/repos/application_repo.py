import uuid
from typing import Iterable, List, Optional

from sqlalchemy import select

from models.models import Application

from .base_repo import CommitMixin


class ApplicationRepo(CommitMixin):
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, application_id: uuid.UUID) -> Optional[Application]:
        result = await self.db.execute(
            select(Application).where(Application.id == application_id)
        )
        return result.scalar_one_or_none()

    async def latest_for_pair(
        self, property_id: uuid.UUID, renter_id: uuid.UUID
    ) -> Optional[Application]:
        result = await self.db.execute(
            select(Application)
            .where(
                Application.property_id == property_id,
                Application.renter_id == renter_id,
            )
            .order_by(Application.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def list_all(self) -> List[Application]:
        result = await self.db.execute(
            select(Application).order_by(Application.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_renter(self, renter_id: uuid.UUID) -> List[Application]:
        result = await self.db.execute(
            select(Application)
            .where(Application.renter_id == renter_id)
            .order_by(Application.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_properties(
        self, property_ids: Iterable[uuid.UUID]
    ) -> List[Application]:
        ids = list(property_ids)
        if not ids:
            return []
        result = await self.db.execute(
            select(Application)
            .where(Application.property_id.in_(ids))
            .order_by(Application.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, **data) -> Application:
        application = Application(**data)
        self.db.add(application)
        await self.db.flush()
        return application

    async def stage(self, application: Application, **values) -> Application:
        for key, value in values.items():
            setattr(application, key, value)
        await self.db.flush()
        return application

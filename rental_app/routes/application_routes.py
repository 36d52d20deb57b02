import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user, get_optional_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import (
    ApplicationCreate,
    ApplicationOut,
    ApplicationProcess,
    LeaseStart,
)
from services.application_service import ApplicationService

router = APIRouter(tags=["Applications"])


@cbv(router=router)
class ApplicationRoutes:
    @router.get("/", response_model=List[ApplicationOut])
    @safe_handler
    async def list_applications(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).list_for_user(current_user)

    @router.post("/submit", response_model=ApplicationOut)
    @safe_handler
    async def submit(
        self,
        data: ApplicationCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: Optional[User] = Depends(get_optional_user),
    ):
        return await ApplicationService(db).submit_application(
            current_user=current_user,
            property_id=data.property_id,
            message=data.message,
            move_in_date=data.move_in_date,
        )

    @router.patch("/{application_id}/process", response_model=Optional[ApplicationOut])
    @safe_handler
    async def process(
        self,
        application_id: uuid.UUID,
        data: ApplicationProcess,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).process_application(
            current_user=current_user,
            application_id=application_id,
            new_status=data.status,
            reason=data.reason,
        )

    @router.patch("/{application_id}/lease-start", response_model=Optional[ApplicationOut])
    @safe_handler
    async def lease_start(
        self,
        application_id: uuid.UUID,
        data: LeaseStart,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).set_lease_start(
            current_user=current_user,
            application_id=application_id,
            start_date=data.start_date,
        )

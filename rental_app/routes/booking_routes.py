import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import BookingCreate, BookingOut, BookingUpdate
from services.booking_service import BookingService

router = APIRouter(tags=["Bookings"])


@cbv(router=router)
class BookingRoutes:
    @router.get("/", response_model=List[BookingOut])
    @safe_handler
    async def list_bookings(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await BookingService(db).list_for_user(current_user)

    @router.post("/create", response_model=BookingOut)
    @safe_handler
    async def create(
        self,
        data: BookingCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await BookingService(db).add_booking(
            current_user=current_user, data=data.model_dump()
        )

    @router.patch("/{booking_id}/update", response_model=Optional[BookingOut])
    @safe_handler
    async def update(
        self,
        booking_id: uuid.UUID,
        data: BookingUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await BookingService(db).update_booking(
            current_user=current_user,
            booking_id=booking_id,
            data=data.model_dump(exclude_unset=True),
        )

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import BillCreate, BillOut, CountOut
from services.bill_service import BillService

router = APIRouter(tags=["Bills"])


@cbv(router=router)
class BillRoutes:
    @router.get("/", response_model=List[BillOut])
    @safe_handler
    async def list_bills(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await BillService(db).list_for_user(current_user)

    @router.post("/create", response_model=BillOut)
    @safe_handler
    async def create(
        self,
        data: BillCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await BillService(db).create_bill(
            current_user=current_user, data=data.model_dump()
        )

    @router.post("/{bill_id}/pay", response_model=Optional[BillOut])
    @safe_handler
    async def pay(
        self,
        bill_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await BillService(db).pay_bill(current_user=current_user, bill_id=bill_id)

    @router.post("/mark-overdue", response_model=CountOut)
    @safe_handler
    async def mark_overdue(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        count = await BillService(db).mark_overdue_bills(current_user)
        return {"success": True, "count": count}

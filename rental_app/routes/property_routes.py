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
    DeleteOut,
    MaintenanceToggle,
    PropertyCreate,
    PropertyOut,
    PropertyUpdate,
)
from services.property_service import PropertyService

router = APIRouter(tags=["Property Management"])


@cbv(router=router)
class PropertyRoutes:
    @router.get("/", response_model=List[PropertyOut])
    @safe_handler
    async def list_properties(
        self,
        owner_id: Optional[uuid.UUID] = None,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).list_properties(owner_id=owner_id)

    @router.get("/{property_id}", response_model=PropertyOut)
    @safe_handler
    async def get_property(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).get_property(property_id)

    @router.post("/create", response_model=PropertyOut)
    @safe_handler
    async def create(
        self,
        data: PropertyCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: Optional[User] = Depends(get_optional_user),
    ):
        return await PropertyService(db).create_property(
            current_user=current_user, data=data.model_dump()
        )

    @router.patch("/{property_id}/update", response_model=Optional[PropertyOut])
    @safe_handler
    async def update(
        self,
        property_id: uuid.UUID,
        data: PropertyUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).update_property(
            current_user=current_user,
            property_id=property_id,
            data=data.model_dump(exclude_unset=True),
        )

    @router.patch("/{property_id}/maintenance", response_model=Optional[PropertyOut])
    @safe_handler
    async def maintenance(
        self,
        property_id: uuid.UUID,
        data: MaintenanceToggle,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).set_maintenance(
            current_user=current_user, property_id=property_id, on=data.on
        )

    @router.delete("/{property_id}/delete", response_model=DeleteOut)
    @safe_handler
    async def delete_property(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        deleted = await PropertyService(db).delete_property(
            current_user=current_user, property_id=property_id
        )
        return {"success": True, "deleted": deleted}

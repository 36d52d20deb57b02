import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from core.validators import jwt_protect
from models.models import User
from schemas.schema import (
    ProfileCreate,
    ReactivationRequest,
    ReactivationToggle,
    UserOut,
)
from services.account_service import AccountService

router = APIRouter(tags=["Accounts"])


@cbv(router=router)
class AccountRoutes:
    @router.post("/profile", response_model=UserOut)
    @safe_handler
    async def create_profile(
        self,
        data: ProfileCreate,
        db: AsyncSession = Depends(get_db_async),
        token_user_id: uuid.UUID = Depends(jwt_protect),
    ):
        return await AccountService(db).create_profile(
            user_id=token_user_id,
            email=data.email,
            full_name=data.full_name,
            phone=data.phone,
            role=data.role,
        )

    @router.get("/me", response_model=UserOut)
    @safe_handler
    async def me(self, current_user: User = Depends(get_current_user)):
        return current_user

    @router.get("/", response_model=List[UserOut])
    @safe_handler
    async def list_users(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AccountService(db).list_users(current_user)

    @router.post("/{user_id}/deactivate", response_model=Optional[UserOut])
    @safe_handler
    async def deactivate(
        self,
        user_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AccountService(db).deactivate_account(current_user, user_id)

    @router.post("/{user_id}/reactivate", response_model=Optional[UserOut])
    @safe_handler
    async def reactivate(
        self,
        user_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AccountService(db).reactivate_account(current_user, user_id)

    @router.patch("/{user_id}/reactivation-requests", response_model=Optional[UserOut])
    @safe_handler
    async def toggle_reactivation_requests(
        self,
        user_id: uuid.UUID,
        data: ReactivationToggle,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AccountService(db).set_reactivation_allowed(
            current_user, user_id, data.allowed
        )

    @router.post("/reactivation-request")
    @safe_handler
    async def request_reactivation(
        self,
        data: ReactivationRequest,
        db: AsyncSession = Depends(get_db_async),
    ):
        requested = await AccountService(db).request_reactivation(data.email)
        return {"success": True, "requested": requested}

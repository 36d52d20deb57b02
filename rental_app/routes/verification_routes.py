import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.enums import VerificationChannel
from models.models import User
from schemas.schema import (
    DocumentLinksOut,
    IdVerificationRequest,
    PhoneVerificationRequest,
    UserOut,
    VerificationDecision,
    VerificationSummaryOut,
)
from services.verification_service import VerificationService

router = APIRouter(tags=["Verification"])


@cbv(router=router)
class VerificationRoutes:
    @router.get("/{user_id}/summary", response_model=VerificationSummaryOut)
    @safe_handler
    async def summary(
        self,
        user_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await VerificationService(db).summary(current_user, user_id)

    @router.post("/email/request", response_model=UserOut)
    @safe_handler
    async def request_email(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await VerificationService(db).request_email_verification(current_user)

    @router.post("/phone/request", response_model=UserOut)
    @safe_handler
    async def request_phone(
        self,
        data: PhoneVerificationRequest,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await VerificationService(db).request_phone_verification(
            current_user, phone=data.phone
        )

    @router.post("/id/request", response_model=UserOut)
    @safe_handler
    async def request_id(
        self,
        data: IdVerificationRequest,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await VerificationService(db).request_id_verification(
            current_user,
            document_url=data.document_url,
            back_url=data.back_url,
            id_type=data.id_type,
        )

    @router.get("/{user_id}/documents", response_model=DocumentLinksOut)
    @safe_handler
    async def documents(
        self,
        user_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await VerificationService(db).document_links(current_user, user_id)

    @router.post("/{channel}/{user_id}/approve", response_model=Optional[UserOut])
    @safe_handler
    async def approve(
        self,
        channel: VerificationChannel,
        user_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await VerificationService(db).approve_verification(
            current_user, channel, user_id
        )

    @router.post("/{channel}/{user_id}/reject", response_model=Optional[UserOut])
    @safe_handler
    async def reject(
        self,
        channel: VerificationChannel,
        user_id: uuid.UUID,
        data: VerificationDecision,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await VerificationService(db).reject_verification(
            current_user, channel, user_id, reason=data.reason
        )

from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import CountOut, FeedOut
from services.notification_feed import unread_count
from services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])


@cbv(router=router)
class NotificationRoutes:
    @router.get("/", response_model=FeedOut)
    @safe_handler
    async def feed(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        items = await NotificationService(db).get_feed(current_user)
        return {
            "items": [item.as_dict() for item in items],
            "unread_count": unread_count(items),
        }

    @router.get("/unread-count", response_model=CountOut)
    @safe_handler
    async def unread(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        count = await NotificationService(db).unread_count(current_user)
        return {"success": True, "count": count}

    @router.post("/{notification_id}/read", response_model=CountOut)
    @safe_handler
    async def mark_as_read(
        self,
        notification_id: str,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        await NotificationService(db).mark_as_read(current_user, notification_id)
        return {"success": True, "count": 1}

    @router.post("/read-all", response_model=CountOut)
    @safe_handler
    async def mark_all_as_read(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        count = await NotificationService(db).mark_all_as_read(current_user)
        return {"success": True, "count": count}

    @router.delete("/clear", response_model=CountOut)
    @safe_handler
    async def clear(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        count = await NotificationService(db).clear_notifications(current_user)
        return {"success": True, "count": count}

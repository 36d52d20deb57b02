import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.models import User

from .get_db import get_db_async
from .validators import jwt_protect

logger = logging.getLogger(__name__)


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db_async),
):
    """Resolve the caller if a valid token is present, else None.

    Used by gated routes so an anonymous caller receives the gate's
    login message instead of a bare 401.
    """
    try:
        user_id = await jwt_protect(request)
    except HTTPException:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()

    if user and user.inactive:
        return None

    return user


async def get_current_user(
    user_id=Depends(jwt_protect), db: AsyncSession = Depends(get_db_async)
) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()

    if not user:
        raise HTTPException(status_code=404, detail="Not Authenticated")

    if user.inactive:
        logger.info("Rejected request from deactivated account %s", user.id)
        raise HTTPException(status_code=403, detail="This account has been deactivated.")

    return user

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Request

from .settings import settings


def create_access_token(user_id: uuid.UUID, expires_minutes: int = 60) -> str:
    payload = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_http_access_token(token: str) -> uuid.UUID:
    payload = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.ALGORITHM],
    )

    user_id = payload.get("sub")
    if not user_id:
        raise jwt.InvalidTokenError("Token missing user ID")

    try:
        return uuid.UUID(user_id)
    except ValueError:
        raise jwt.InvalidTokenError("Invalid user ID format in token")


def extract_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get("access_token")


async def jwt_protect(request: Request) -> uuid.UUID:
    token = extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    if not settings.JWT_SECRET_KEY:
        raise HTTPException(status_code=500, detail="Token validation is not configured")

    try:
        return decode_http_access_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

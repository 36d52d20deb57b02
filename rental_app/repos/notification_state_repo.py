import logging
import uuid
from typing import Iterable, Set

from core.cache import Cache, cache as default_cache
from core.settings import settings

logger = logging.getLogger(__name__)

READ_KEY = "readNotifications:{user_id}"
DISMISSED_KEY = "dismissedNotifications:{user_id}"


class NotificationStateRepo:
    """Per-user read and dismissed notification ids kept in the key-value cache.

    Ids cover both persisted notification ids and synthetic keys such as
    ``overdue-bills``, so this state never lives in the notifications table.
    """

    def __init__(self, cache: Cache | None = None, ttl: int | None = None):
        self.cache = cache or default_cache
        self.ttl = ttl or settings.NOTIFICATION_STATE_TTL

    async def _load(self, key: str) -> Set[str]:
        try:
            data = await self.cache.get_json(key)
        except Exception:
            logger.exception("Failed to load notification state %s", key)
            return set()
        if not isinstance(data, list):
            return set()
        return {str(item) for item in data}

    async def _save(self, key: str, ids: Set[str]) -> None:
        try:
            await self.cache.set_json(key, sorted(ids), ttl=self.ttl)
        except Exception:
            logger.exception("Failed to save notification state %s", key)

    async def get_read(self, user_id: uuid.UUID) -> Set[str]:
        return await self._load(READ_KEY.format(user_id=user_id))

    async def get_dismissed(self, user_id: uuid.UUID) -> Set[str]:
        return await self._load(DISMISSED_KEY.format(user_id=user_id))

    async def add_read(self, user_id: uuid.UUID, ids: Iterable[str]) -> Set[str]:
        key = READ_KEY.format(user_id=user_id)
        current = await self._load(key)
        current.update(str(item) for item in ids)
        await self._save(key, current)
        return current

    async def remove_read(self, user_id: uuid.UUID, ids: Iterable[str]) -> Set[str]:
        key = READ_KEY.format(user_id=user_id)
        current = await self._load(key)
        current.difference_update(str(item) for item in ids)
        await self._save(key, current)
        return current

    async def add_dismissed(self, user_id: uuid.UUID, ids: Iterable[str]) -> Set[str]:
        key = DISMISSED_KEY.format(user_id=user_id)
        current = await self._load(key)
        current.update(str(item) for item in ids)
        await self._save(key, current)
        return current

import asyncio
import logging
import time
import urllib.parse
from typing import Optional

import cloudinary
import cloudinary.api
import cloudinary.uploader
from cloudinary.utils import private_download_url

from core.settings import settings

logger = logging.getLogger(__name__)


def public_id_from_url(url: str) -> Optional[str]:
    """Extract the Cloudinary public id from a delivery URL or bare id.

    ``https://res.cloudinary.com/demo/image/upload/v17/ids/abc.jpg`` gives
    ``ids/abc``.
    """
    if not url:
        return None
    if "://" not in url:
        return url.rsplit(".", 1)[0] if "." in url.rsplit("/", 1)[-1] else url

    path = urllib.parse.urlparse(url).path
    marker = "/upload/"
    if marker not in path:
        return None
    tail = path.split(marker, 1)[1]
    parts = tail.split("/")
    if parts and parts[0].startswith("v") and parts[0][1:].isdigit():
        parts = parts[1:]
    if not parts:
        return None
    public_id = "/".join(parts)
    if "." in parts[-1]:
        public_id = public_id.rsplit(".", 1)[0]
    return public_id


class DocumentStorage:
    """Identity-document storage on Cloudinary.

    Documents are uploaded as private image resources by the client; the
    backend only hands out short-lived download URLs and removes rejected
    documents.
    """

    def __init__(self):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_SECRET_KEY,
            secure=True,
        )

    async def connect(self) -> bool:
        loop = asyncio.get_running_loop()
        info = await loop.run_in_executor(None, cloudinary.api.ping)
        return info.get("status") == "ok"

    def signed_url(self, document_url: str, expires_in: int | None = None) -> Optional[str]:
        public_id = public_id_from_url(document_url)
        if not public_id:
            return None
        return private_download_url(
            public_id,
            format=None,
            resource_type="image",
            type="private",
            expires_at=int(time.time())
            + (expires_in or settings.DOCUMENT_URL_TTL_SECONDS),
        )

    async def delete(self, document_url: str) -> bool:
        public_id = public_id_from_url(document_url)
        if not public_id:
            return False

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            None,
            lambda: cloudinary.uploader.destroy(
                public_id, resource_type="image", type="private", invalidate=True
            ),
        )
        return result.get("result") == "ok"

    async def safe_delete(self, *document_urls: Optional[str]) -> None:
        for url in document_urls:
            if not url:
                continue
            try:
                await self.delete(url)
            except Exception:
                logger.exception("Failed to delete identity document %s", url)


document_storage = DocumentStorage()

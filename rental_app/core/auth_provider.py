import logging
import uuid

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .breaker import auth_breaker
from .settings import settings

logger = logging.getLogger(__name__)


class AuthProviderClient:
    """Admin API of the hosted identity provider.

    Only the two calls the lifecycle needs: revoking every session of a
    user and force-confirming an email address.
    """

    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        timeout: float | None = None,
    ):
        self.base_url = (base_url or settings.AUTH_ADMIN_URL or "").rstrip("/")
        self.service_key = service_key or settings.AUTH_SERVICE_KEY
        self.timeout = timeout or settings.AUTH_TIMEOUT_SECONDS

    @property
    def headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key or "",
            "Content-Type": "application/json",
        }

    def _require_config(self):
        if not self.base_url or not self.service_key:
            raise ConnectionError("Auth provider admin API is not configured")

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True,
    )
    async def _request(self, method: str, path: str, json: dict | None = None):
        self._require_config()

        async def handler():
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                res = await client.request(
                    method, f"{self.base_url}{path}", headers=self.headers, json=json
                )
            res.raise_for_status()
            return res

        return await auth_breaker.call(handler)

    async def revoke_sessions(self, user_id: uuid.UUID) -> None:
        await self._request("POST", f"/admin/users/{user_id}/logout")
        logger.info("Revoked all sessions for user %s", user_id)

    async def confirm_email(self, user_id: uuid.UUID) -> None:
        await self._request(
            "PUT", f"/admin/users/{user_id}", json={"email_confirm": True}
        )
        logger.info("Force-confirmed email for user %s", user_id)


auth_provider = AuthProviderClient()

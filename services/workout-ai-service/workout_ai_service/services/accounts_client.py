from __future__ import annotations

import httpx
import structlog
from backend_common.dependencies import user_headers
from backend_common.http_client import ServiceClient, ServiceResponse
from pydantic import ValidationError

from ..exceptions import UpstreamError
from ..schemas.profile import UserProfile

logger = structlog.get_logger(__name__)


class AccountsServiceClient:
    """Reads profiles, equipment and account emails from accounts-service."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> ServiceClient:
        return ServiceClient(timeout=self._timeout, base_url=self.base_url, transport=self._transport)

    @staticmethod
    def _raise_unavailable(resp: ServiceResponse, what: str) -> None:
        raise UpstreamError(
            f"accounts-service failed to return {what}: {resp.error or resp.status_code}",
            status=resp.status_code,
        )

    @staticmethod
    def _parse_profile(data: object) -> UserProfile | None:
        try:
            return UserProfile.model_validate(data)
        except ValidationError:
            logger.warning("profile_record_invalid", preview=str(data)[:200])
            return None

    async def get_profile(self, user_id: str) -> UserProfile | None:
        async with self._client() as client:
            resp = await client.get(f"/profiles/{user_id}", headers=user_headers(user_id), user_id=user_id)
        if resp.not_found:
            return None
        if not resp.success:
            self._raise_unavailable(resp, "profile")
        return self._parse_profile(resp.data)

    async def list_notification_profiles(self) -> list[UserProfile]:
        """Every profile with daily email notifications switched on."""
        async with self._client() as client:
            resp = await client.get("/profiles/notifications/enabled")
        if not resp.success:
            self._raise_unavailable(resp, "notification profiles")
        rows = resp.data if isinstance(resp.data, list) else []
        profiles = [p for p in (self._parse_profile(row) for row in rows) if p is not None]
        return [p for p in profiles if p.email_notifications]

    async def get_account_email(self, user_id: str) -> str | None:
        async with self._client() as client:
            resp = await client.get(f"/users/{user_id}/email", headers=user_headers(user_id), user_id=user_id)
        if resp.not_found:
            return None
        if not resp.success:
            self._raise_unavailable(resp, "account email")
        email = resp.data.get("email") if isinstance(resp.data, dict) else None
        return email.strip() if isinstance(email, str) and email.strip() else None

    async def get_equipment(self, user_id: str) -> list[str]:
        async with self._client() as client:
            resp = await client.get(
                f"/profiles/{user_id}/equipment",
                headers=user_headers(user_id),
                user_id=user_id,
            )
        if resp.not_found:
            return []
        if not resp.success:
            self._raise_unavailable(resp, "equipment")
        items = resp.data.get("equipment_list") if isinstance(resp.data, dict) else resp.data
        if not isinstance(items, list):
            return []
        return [item.strip() for item in items if isinstance(item, str) and item.strip()]

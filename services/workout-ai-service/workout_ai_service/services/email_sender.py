from __future__ import annotations

import httpx
import structlog
from backend_common.http_client import ServiceClient

from ..config import Settings
from ..exceptions import ConfigurationError, EmailDeliveryError

logger = structlog.get_logger(__name__)


class ResendEmailSender:
    """Outbound HTML email through the Resend REST API."""

    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None):
        if not settings.RESEND_API_KEY:
            raise ConfigurationError("RESEND_API_KEY is not configured")
        self._api_key = settings.RESEND_API_KEY
        self._url = settings.RESEND_API_URL
        self._sender = settings.EMAIL_FROM
        self._timeout = settings.SERVICE_TIMEOUT_SECONDS
        self._transport = transport

    async def send(self, *, to: str, subject: str, html: str) -> str | None:
        """Returns the provider message id when one is reported."""
        payload = {"from": self._sender, "to": [to], "subject": subject, "html": html}
        async with ServiceClient(
            timeout=self._timeout,
            headers={"Authorization": f"Bearer {self._api_key}"},
            transport=self._transport,
        ) as client:
            resp = await client.post(self._url, json=payload, recipient=to)

        if not resp.success:
            raise EmailDeliveryError(f"Email send failed: {resp.error or resp.status_code}")

        message_id = resp.data.get("id") if isinstance(resp.data, dict) else None
        logger.info("email_sent", recipient=to, message_id=message_id)
        return message_id

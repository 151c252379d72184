"""
Service HTTP client with safe JSON parsing and structured logging.

Usage:
    async with ServiceClient(base_url=settings.ACCOUNTS_SERVICE_URL) as client:
        resp = await client.get("/profiles/123", headers=headers)
        profile = resp.data if resp.success else None
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

logger = structlog.get_logger(__name__)


@dataclass
class ServiceResponse:
    """Result of a service call with parsed JSON or error info."""

    success: bool
    data: Any = None
    status_code: int | None = None
    error: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class ServiceClient:
    """
    Async HTTP client wrapper with:
    - Safe JSON parsing (failures come back as ServiceResponse, never raise)
    - Structured logging on errors
    - Optional base URL and default headers (e.g. bearer tokens)
    - Configurable timeouts and transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        timeout: float | httpx.Timeout = 20.0,
        follow_redirects: bool = True,
        *,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if isinstance(timeout, int | float):
            self._timeout = httpx.Timeout(timeout)
        else:
            self._timeout = timeout
        self._follow_redirects = follow_redirects
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers or {})
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ServiceClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            follow_redirects=self._follow_redirects,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _parse_json(self, response: httpx.Response, url: str, **log_context: Any) -> Any | None:
        """Parse JSON from response, log and return None on failure."""
        try:
            return response.json()
        except ValueError:
            logger.error(
                "json_parse_failed",
                url=url,
                status_code=response.status_code,
                body_preview=response.text[:500] if response.text else "",
                **log_context,
            )
            return None

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
        expected_status: int | tuple[int, ...] = 200,
        **log_context: Any,
    ) -> ServiceResponse:
        """Perform a request and parse the JSON body of an expected response."""
        if isinstance(expected_status, int):
            expected_status = (expected_status,)

        try:
            assert self._client is not None, "Client not initialized"
            response = await self._client.request(method, url, headers=headers, params=params, json=json)
        except httpx.HTTPError as exc:
            logger.error("http_request_failed", method=method, url=url, error=str(exc), **log_context)
            return ServiceResponse(success=False, error=str(exc))

        if response.status_code not in expected_status:
            # 404 is an answer, not an outage; callers decide what it means
            log = logger.info if response.status_code == 404 else logger.error
            log(
                "unexpected_status_code",
                method=method,
                url=url,
                status_code=response.status_code,
                expected=expected_status,
                body_preview=response.text[:500] if response.text else "",
                **log_context,
            )
            return ServiceResponse(
                success=False,
                status_code=response.status_code,
                error=f"Unexpected status {response.status_code}",
            )

        data = self._parse_json(response, url, **log_context)
        if data is None:
            return ServiceResponse(success=False, status_code=response.status_code, error="JSON parse failed")

        return ServiceResponse(
            success=True,
            data=data,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    async def get(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        expected_status: int | tuple[int, ...] = 200,
        **log_context: Any,
    ) -> ServiceResponse:
        """Perform GET request and parse JSON response."""
        return await self.request(
            "GET",
            url,
            headers=headers,
            params=params,
            expected_status=expected_status,
            **log_context,
        )

    async def post(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json: Any = None,
        expected_status: int | tuple[int, ...] = (200, 201),
        **log_context: Any,
    ) -> ServiceResponse:
        """Perform POST request and parse JSON response."""
        return await self.request(
            "POST",
            url,
            headers=headers,
            json=json,
            expected_status=expected_status,
            **log_context,
        )

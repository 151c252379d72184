from __future__ import annotations

import httpx
import structlog
from backend_common.dependencies import user_headers
from backend_common.http_client import ServiceClient
from pydantic import ValidationError

from ..exceptions import UpstreamError
from ..schemas.profile import WorkoutHistoryEntry

logger = structlog.get_logger(__name__)


class WorkoutHistoryClient:
    """Reads a user's logged workouts from workouts-service."""

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

    async def recent_workouts(
        self,
        user_id: str,
        *,
        limit: int,
        with_feedback: bool = False,
    ) -> list[WorkoutHistoryEntry]:
        """Most recent first, at most ``limit`` entries."""
        params = {"limit": limit, "order": "desc"}
        if with_feedback:
            params["with_feedback"] = "true"

        async with ServiceClient(timeout=self._timeout, base_url=self.base_url, transport=self._transport) as client:
            resp = await client.get("/workouts/history", headers=user_headers(user_id), params=params, user_id=user_id)
        if not resp.success:
            raise UpstreamError(
                f"workouts-service failed to return history: {resp.error or resp.status_code}",
                status=resp.status_code,
            )

        rows = resp.data if isinstance(resp.data, list) else []
        entries: list[WorkoutHistoryEntry] = []
        for row in rows:
            try:
                entries.append(WorkoutHistoryEntry.model_validate(row))
            except ValidationError:
                logger.warning("history_record_invalid", user_id=user_id, preview=str(row)[:200])

        if with_feedback:
            entries = [e for e in entries if e.feedback is not None]
        if all(e.created_at for e in entries):
            # ISO-8601 timestamps sort lexicographically
            entries.sort(key=lambda e: e.created_at or "", reverse=True)
        return entries[:limit]

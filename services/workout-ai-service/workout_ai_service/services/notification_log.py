"""Append-only delivery log for the daily workout email."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .. import models
from ..schemas.notifications import NotificationLogEntry
from ..schemas.workout import Workout


class NotificationLogRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def add(self, *, user_id: str, email_sent_to: str, workout: Workout) -> NotificationLogEntry:
        """Each call opens its own session, so entries for different recipients never share a transaction."""
        async with self._session_factory() as session:
            row = models.NotificationLog(
                user_id=user_id,
                email_sent_to=email_sent_to,
                workout_data=workout.to_log_payload(),
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return NotificationLogEntry.model_validate(row)

    async def list_for_user(self, user_id: str, *, limit: int = 30) -> list[NotificationLogEntry]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(models.NotificationLog)
                .where(models.NotificationLog.user_id == user_id)
                .order_by(models.NotificationLog.sent_at.desc(), models.NotificationLog.id.desc())
                .limit(limit)
            )
            return [NotificationLogEntry.model_validate(row) for row in result.scalars().all()]

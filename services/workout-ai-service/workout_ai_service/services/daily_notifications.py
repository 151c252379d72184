"""
Daily workout email batch.

Per run: collect recipients, then for each one independently build the
adaptive context, generate, render, send and (in production) log. A
recipient's failure is recorded in the summary and never stops the others.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from structlog.contextvars import bound_contextvars

from ..exceptions import ConfigurationError, RecipientError, WorkoutAIError
from ..metrics import DAILY_EMAILS_FAILED_TOTAL, DAILY_EMAILS_SENT_TOTAL, DAILY_EMAILS_SKIPPED_TOTAL
from ..schemas.generation import AdaptiveContext
from ..schemas.notifications import DailyBatchSummary, Recipient, RecipientOutcome
from ..schemas.profile import UserProfile, WorkoutHistoryEntry
from .email_renderer import render_daily_workout_email

logger = structlog.get_logger(__name__)

CANCELLED_KIND = "cancelled"


@dataclass(frozen=True)
class BatchMode:
    """Production when ``test_user_id`` is unset; otherwise a single dry-run send."""

    test_user_id: str | None = None
    test_email: str | None = None

    @property
    def is_test(self) -> bool:
        return self.test_user_id is not None

    @property
    def label(self) -> str:
        return "test" if self.is_test else "production"

    @classmethod
    def test(cls, user_id: str, email: str) -> BatchMode:
        return cls(test_user_id=user_id, test_email=email)


PRODUCTION = BatchMode()


class DailyWorkoutNotifier:
    def __init__(
        self,
        *,
        accounts,
        history,
        generator,
        sender,
        log_repository=None,
        app_url: str,
        history_limit: int = 5,
        concurrency: int = 1,
        timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.accounts = accounts
        self.history = history
        self.generator = generator
        self.sender = sender
        self.log_repository = log_repository
        self.app_url = app_url
        self.history_limit = history_limit
        self.concurrency = max(1, concurrency)
        self.timeout_seconds = timeout_seconds
        self._clock = clock

    async def run(self, mode: BatchMode = PRODUCTION) -> DailyBatchSummary:
        if mode.is_test and not mode.test_email:
            raise ValueError("test mode needs a target email")
        if not mode.is_test and self.log_repository is None:
            raise ConfigurationError("notification log storage is required for production runs")

        started = self._clock()
        deadline = started + self.timeout_seconds if self.timeout_seconds else None

        profiles = await self._collect_profiles(mode)
        logger.info("daily_workout_batch_started", mode=mode.label, recipients=len(profiles))

        semaphore = asyncio.Semaphore(self.concurrency)

        async def worker(profile: UserProfile) -> RecipientOutcome | None:
            async with semaphore:
                if deadline is not None and self._clock() >= deadline:
                    return self._cancelled(profile)
                return await self._process(profile, mode)

        outcomes = await asyncio.gather(*(worker(p) for p in profiles))
        results = [o for o in outcomes if o is not None]
        summary = DailyBatchSummary(
            processed=len(results),
            skipped=len(outcomes) - len(results),
            results=results,
        )
        logger.info(
            "daily_workout_batch_finished",
            mode=mode.label,
            processed=summary.processed,
            skipped=summary.skipped,
            failed=summary.failed,
            duration_seconds=round(self._clock() - started, 3),
        )
        return summary

    async def _collect_profiles(self, mode: BatchMode) -> list[UserProfile]:
        # failures here mean the batch cannot start and are allowed to propagate
        if mode.is_test:
            profile = await self.accounts.get_profile(mode.test_user_id)
            if profile is None:
                logger.warning("daily_workout_test_profile_missing", user_id=mode.test_user_id)
                return []
            return [profile]
        return await self.accounts.list_notification_profiles()

    async def _resolve_target(self, profile: UserProfile, mode: BatchMode) -> str | None:
        if mode.is_test:
            return mode.test_email
        preferred = (profile.notification_email or "").strip()
        if preferred:
            return preferred
        return await self.accounts.get_account_email(profile.id)

    async def _build_recipient(self, profile: UserProfile, target: str) -> Recipient:
        equipment, recent = await asyncio.gather(
            self.accounts.get_equipment(profile.id),
            self.history.recent_workouts(profile.id, limit=self.history_limit),
        )
        return Recipient(
            user_id=profile.id,
            target_email=target,
            goal=profile.goal,
            profile=profile.body_profile(),
            equipment=equipment,
            recent_workout_types=[w.type for w in recent if w.type],
        )

    @staticmethod
    def _context_for(recipient: Recipient) -> AdaptiveContext:
        return AdaptiveContext(
            goal=recipient.goal,
            equipment=recipient.equipment,
            recent_workouts=[WorkoutHistoryEntry(type=t) for t in recipient.recent_workout_types],
            profile=recipient.profile,
        )

    async def _deliver(self, profile: UserProfile, target: str, mode: BatchMode) -> None:
        recipient = await self._build_recipient(profile, target)
        workout = await self.generator.generate_adaptive(self._context_for(recipient), user_id=profile.id)
        email = render_daily_workout_email(workout, app_url=self.app_url)
        await self.sender.send(to=target, subject=email.subject, html=email.html)
        DAILY_EMAILS_SENT_TOTAL.labels(mode=mode.label).inc()

        if not mode.is_test:
            try:
                await self.log_repository.add(user_id=profile.id, email_sent_to=target, workout=workout)
            except Exception as exc:
                # the email is already out; the outcome stays a success
                logger.exception("notification_log_write_failed", error=str(exc))

    async def _process(self, profile: UserProfile, mode: BatchMode) -> RecipientOutcome | None:
        with bound_contextvars(user_id=profile.id, batch_mode=mode.label):
            target = None
            try:
                target = await self._resolve_target(profile, mode)
                if not target:
                    DAILY_EMAILS_SKIPPED_TOTAL.inc()
                    logger.info("daily_workout_recipient_skipped", reason="no_email")
                    return None
                await self._deliver(profile, target, mode)
            except WorkoutAIError as exc:
                return self._failed(profile.id, target, RecipientError(profile.id, exc))
            except Exception as exc:
                logger.exception("daily_workout_recipient_crashed")
                return self._failed(profile.id, target, RecipientError(profile.id, exc))

            logger.info("daily_workout_sent", target=target)
            return RecipientOutcome(user_id=profile.id, target=target, success=True)

    def _failed(self, user_id: str, target: str | None, error: RecipientError) -> RecipientOutcome:
        DAILY_EMAILS_FAILED_TOTAL.labels(kind=error.kind).inc()
        logger.warning("daily_workout_recipient_failed", kind=error.kind, error=error.message)
        return RecipientOutcome(
            user_id=user_id,
            target=target,
            success=False,
            error=error.message,
            error_kind=error.kind,
        )

    def _cancelled(self, profile: UserProfile) -> RecipientOutcome:
        DAILY_EMAILS_FAILED_TOTAL.labels(kind=CANCELLED_KIND).inc()
        logger.warning("daily_workout_recipient_cancelled", user_id=profile.id)
        return RecipientOutcome(
            user_id=profile.id,
            success=False,
            error="Batch deadline reached before this recipient was processed",
            error_kind=CANCELLED_KIND,
        )

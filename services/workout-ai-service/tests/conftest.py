import json
import sys
from pathlib import Path

import pytest

SERVICE_ROOT = Path(__file__).resolve().parents[1]
LIBS_ROOT = SERVICE_ROOT.parents[1] / "libs" / "backend-common"
for path in (SERVICE_ROOT, LIBS_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from workout_ai_service.exceptions import EmailDeliveryError, UpstreamError  # noqa: E402
from workout_ai_service.schemas.profile import UserProfile, WorkoutHistoryEntry  # noqa: E402


def workout_payload(**overrides) -> dict:
    payload = {
        "title": "Leg Day",
        "type": "Strength Training",
        "duration_minutes": 45,
        "sections": [
            {"title": "Warm-up", "exercises": [{"name": "Leg swings", "details": "2 min"}]},
            {
                "title": "Main Workout",
                "exercises": [
                    {"name": "Squat", "details": "3x10", "category": "strength", "muscle_group": "legs"},
                    {"name": "Lunge", "details": "3x12", "category": "strength", "muscle_group": "legs"},
                ],
            },
        ],
    }
    payload.update(overrides)
    return payload


class FakeLLM:
    """Replays canned completions; an Exception in the queue is raised instead."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[dict] = []

    async def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        self.calls.append({"system": system_prompt, "user": user_prompt})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response


class FakeAccounts:
    def __init__(self, profiles=(), emails=None, equipment=None, failing_emails=()):
        self.profiles = {p.id: p for p in profiles}
        self.emails = emails or {}
        self.equipment = equipment or {}
        self.failing_emails = set(failing_emails)

    async def get_profile(self, user_id):
        return self.profiles.get(user_id)

    async def list_notification_profiles(self):
        return [p for p in self.profiles.values() if p.email_notifications]

    async def get_account_email(self, user_id):
        if user_id in self.failing_emails:
            raise UpstreamError("accounts-service failed to return account email: 503", status=503)
        return self.emails.get(user_id)

    async def get_equipment(self, user_id):
        return list(self.equipment.get(user_id, []))


class FakeHistory:
    def __init__(self, entries=None):
        self.entries = entries or {}
        self.calls: list[dict] = []

    async def recent_workouts(self, user_id, *, limit, with_feedback=False):
        self.calls.append({"user_id": user_id, "limit": limit, "with_feedback": with_feedback})
        rows = [WorkoutHistoryEntry(**row) for row in self.entries.get(user_id, [])]
        if with_feedback:
            rows = [r for r in rows if r.feedback is not None]
        return rows[:limit]


class FakeSender:
    def __init__(self, failing=()):
        self.sent: list[dict] = []
        self.failing = set(failing)

    async def send(self, *, to, subject, html):
        if to in self.failing:
            raise EmailDeliveryError("Email send failed: Unexpected status 422")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return f"msg-{len(self.sent)}"


class FakeLogRepository:
    def __init__(self):
        self.entries: list[dict] = []

    async def add(self, *, user_id, email_sent_to, workout):
        self.entries.append({"user_id": user_id, "email_sent_to": email_sent_to, "workout": workout})


def profile(user_id: str, **fields) -> UserProfile:
    fields.setdefault("email_notifications", True)
    return UserProfile(id=user_id, **fields)


@pytest.fixture()
def fake_sender():
    return FakeSender()


@pytest.fixture()
def fake_log():
    return FakeLogRepository()

import pytest
from conftest import FakeAccounts, FakeHistory, FakeLLM, FakeLogRepository, FakeSender, profile, workout_payload
from workout_ai_service.exceptions import ConfigurationError, UpstreamError
from workout_ai_service.services.daily_notifications import PRODUCTION, BatchMode, DailyWorkoutNotifier
from workout_ai_service.services.workout_generation import WorkoutGenerationService

APP_URL = "https://fitness.example.com"


def _suggestion(**overrides):
    return workout_payload(rationale="Balanced session after yesterday's rest.", **overrides)


def _notifier(accounts, llm, *, sender=None, log=None, history=None, **kwargs):
    return DailyWorkoutNotifier(
        accounts=accounts,
        history=history or FakeHistory(),
        generator=WorkoutGenerationService(llm),
        sender=sender or FakeSender(),
        log_repository=log,
        app_url=APP_URL,
        **kwargs,
    )


def _three_recipients():
    return FakeAccounts(
        profiles=[profile("u1"), profile("u2"), profile("u3")],
        emails={"u1": "one@example.com", "u2": "two@example.com", "u3": "three@example.com"},
    )


@pytest.mark.asyncio
async def test_one_failing_recipient_does_not_abort_batch(fake_sender, fake_log):
    llm = FakeLLM(_suggestion(), UpstreamError("AI API error: 500", status=500), _suggestion())
    notifier = _notifier(_three_recipients(), llm, sender=fake_sender, log=fake_log)

    summary = await notifier.run(PRODUCTION)

    assert summary.processed == 3
    outcomes = {r.user_id: r for r in summary.results}
    assert outcomes["u1"].success and outcomes["u3"].success
    assert not outcomes["u2"].success
    assert outcomes["u2"].error_kind == "upstream_unavailable"
    assert outcomes["u2"].target == "two@example.com"
    assert [e["user_id"] for e in fake_log.entries] == ["u1", "u3"]
    assert [s["to"] for s in fake_sender.sent] == ["one@example.com", "three@example.com"]


@pytest.mark.asyncio
async def test_malformed_output_and_send_failure_are_recorded(fake_log):
    llm = FakeLLM("not json at all", _suggestion(), _suggestion())
    sender = FakeSender(failing={"two@example.com"})
    notifier = _notifier(_three_recipients(), llm, sender=sender, log=fake_log)

    summary = await notifier.run(PRODUCTION)

    kinds = {r.user_id: r.error_kind for r in summary.results}
    assert kinds == {"u1": "upstream_malformed", "u2": "delivery", "u3": None}
    assert summary.failed == 2
    assert [e["user_id"] for e in fake_log.entries] == ["u3"]


@pytest.mark.asyncio
async def test_notification_email_takes_precedence(fake_sender, fake_log):
    accounts = FakeAccounts(
        profiles=[profile("u1", notification_email="alerts@example.com")],
        emails={"u1": "account@example.com"},
    )
    notifier = _notifier(accounts, FakeLLM(_suggestion()), sender=fake_sender, log=fake_log)

    summary = await notifier.run()

    assert summary.results[0].target == "alerts@example.com"
    assert fake_sender.sent[0]["to"] == "alerts@example.com"
    assert fake_log.entries[0]["email_sent_to"] == "alerts@example.com"


@pytest.mark.asyncio
async def test_recipient_without_email_is_skipped_not_failed(fake_sender, fake_log):
    accounts = FakeAccounts(profiles=[profile("u1"), profile("u2")], emails={"u2": "two@example.com"})
    notifier = _notifier(accounts, FakeLLM(_suggestion()), sender=fake_sender, log=fake_log)

    summary = await notifier.run()

    assert summary.processed == 1
    assert summary.skipped == 1
    assert [r.user_id for r in summary.results] == ["u2"]
    assert summary.results[0].success


@pytest.mark.asyncio
async def test_email_lookup_failure_fails_only_that_recipient(fake_sender, fake_log):
    accounts = _three_recipients()
    accounts.failing_emails = {"u1"}
    notifier = _notifier(accounts, FakeLLM(_suggestion()), sender=fake_sender, log=fake_log)

    summary = await notifier.run()

    outcomes = {r.user_id: r for r in summary.results}
    assert not outcomes["u1"].success
    assert outcomes["u1"].target is None
    assert outcomes["u2"].success and outcomes["u3"].success


@pytest.mark.asyncio
async def test_disabled_profiles_are_not_collected(fake_sender, fake_log):
    accounts = FakeAccounts(
        profiles=[profile("u1"), profile("u2", email_notifications=False)],
        emails={"u1": "one@example.com", "u2": "two@example.com"},
    )
    notifier = _notifier(accounts, FakeLLM(_suggestion()), sender=fake_sender, log=fake_log)

    summary = await notifier.run()

    assert [r.user_id for r in summary.results] == ["u1"]


@pytest.mark.asyncio
async def test_test_mode_never_logs(fake_sender, fake_log):
    accounts = FakeAccounts(profiles=[profile("u1", email_notifications=False)], emails={"u1": "one@example.com"})
    notifier = _notifier(accounts, FakeLLM(_suggestion()), sender=fake_sender, log=fake_log)

    summary = await notifier.run(BatchMode.test("u1", "qa@example.com"))

    assert summary.processed == 1
    assert summary.results[0].target == "qa@example.com"
    assert fake_sender.sent[0]["to"] == "qa@example.com"
    assert fake_log.entries == []


@pytest.mark.asyncio
async def test_test_mode_send_failure_still_never_logs(fake_log):
    accounts = FakeAccounts(profiles=[profile("u1")])
    sender = FakeSender(failing={"qa@example.com"})
    notifier = _notifier(accounts, FakeLLM(_suggestion()), sender=sender, log=fake_log)

    summary = await notifier.run(BatchMode.test("u1", "qa@example.com"))

    assert summary.results[0].error_kind == "delivery"
    assert fake_log.entries == []


@pytest.mark.asyncio
async def test_test_mode_unknown_user_processes_nothing(fake_sender):
    notifier = _notifier(FakeAccounts(), FakeLLM(_suggestion()), sender=fake_sender)

    summary = await notifier.run(BatchMode.test("ghost", "qa@example.com"))

    assert summary.processed == 0
    assert fake_sender.sent == []


@pytest.mark.asyncio
async def test_production_run_requires_log_storage():
    notifier = _notifier(_three_recipients(), FakeLLM(_suggestion()))

    with pytest.raises(ConfigurationError):
        await notifier.run(PRODUCTION)


@pytest.mark.asyncio
async def test_recipient_collection_failure_propagates(fake_log):
    class BrokenAccounts(FakeAccounts):
        async def list_notification_profiles(self):
            raise UpstreamError("accounts-service failed to return notification profiles: 503", status=503)

    notifier = _notifier(BrokenAccounts(), FakeLLM(_suggestion()), log=fake_log)

    with pytest.raises(UpstreamError):
        await notifier.run()


@pytest.mark.asyncio
async def test_email_contains_workout_and_escapes_model_text(fake_sender, fake_log):
    llm = FakeLLM(_suggestion(title="<script>alert(1)</script> Burn", type="HIIT", duration_minutes=20))
    accounts = FakeAccounts(profiles=[profile("u1", weight_kg=70)], emails={"u1": "one@example.com"})
    notifier = _notifier(accounts, llm, sender=fake_sender, log=fake_log)

    await notifier.run()

    email = fake_sender.sent[0]
    assert email["subject"] == "Your Daily Workout: <script>alert(1)</script> Burn"
    assert "<script>" not in email["html"]
    assert "&lt;script&gt;" in email["html"]
    assert "Squat" in email["html"]
    assert "~187 cal" in email["html"]
    assert APP_URL in email["html"]


@pytest.mark.asyncio
async def test_daily_prompt_uses_equipment_and_recent_types(fake_sender, fake_log):
    llm = FakeLLM(_suggestion())
    accounts = FakeAccounts(
        profiles=[profile("u1", custom_goal="mobility")],
        emails={"u1": "one@example.com"},
        equipment={"u1": ["Resistance bands"]},
    )
    history = FakeHistory({"u1": [{"type": t, "feedback": None} for t in ["Yoga", "HIIT", "Cardio", "Yoga", "Strength", "HIIT"]]})
    notifier = _notifier(accounts, llm, sender=fake_sender, log=fake_log, history=history, history_limit=5)

    await notifier.run()

    assert history.calls == [{"user_id": "u1", "limit": 5, "with_feedback": False}]
    assert "Resistance bands" in llm.calls[0]["system"]
    user_prompt = llm.calls[0]["user"]
    assert "mobility" in user_prompt
    assert user_prompt.count('"type"') == 5


@pytest.mark.asyncio
async def test_recipients_after_deadline_are_cancelled(fake_sender, fake_log):
    ticks = iter([0.0, 0.0, 5.0, 11.0, 11.0, 11.0])

    def clock():
        return next(ticks, 20.0)

    notifier = _notifier(
        _three_recipients(),
        FakeLLM(_suggestion()),
        sender=fake_sender,
        log=fake_log,
        timeout_seconds=10,
        clock=clock,
    )

    summary = await notifier.run()

    outcomes = {r.user_id: r for r in summary.results}
    assert outcomes["u1"].success and outcomes["u2"].success
    assert outcomes["u3"].error_kind == "cancelled"
    assert len(fake_log.entries) == 2


@pytest.mark.asyncio
async def test_concurrent_run_keeps_isolation(fake_log):
    llm = FakeLLM(_suggestion(), UpstreamError("AI request failed: timeout"), _suggestion())
    sender = FakeSender()
    notifier = _notifier(_three_recipients(), llm, sender=sender, log=fake_log, concurrency=3)

    summary = await notifier.run()

    assert summary.processed == 3
    assert summary.failed == 1
    assert len(fake_log.entries) == 2
    assert len(sender.sent) == 2


class BrokenLogRepository:
    async def add(self, **kwargs):
        raise RuntimeError("Event loop is closed")


@pytest.mark.asyncio
async def test_log_write_failure_keeps_sent_email_a_success(fake_sender):
    notifier = _notifier(
        FakeAccounts(profiles=[profile("u1")], emails={"u1": "one@example.com"}),
        FakeLLM(_suggestion()),
        sender=fake_sender,
        log=BrokenLogRepository(),
    )

    summary = await notifier.run(PRODUCTION)

    assert summary.failed == 0
    assert summary.results[0].success
    assert [s["to"] for s in fake_sender.sent] == ["one@example.com"]

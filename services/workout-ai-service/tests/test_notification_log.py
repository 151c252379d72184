import pytest
import pytest_asyncio
from backend_common.database import create_async_engine_and_session
from conftest import workout_payload
from workout_ai_service.models import Base, NotificationLog
from workout_ai_service.schemas.workout import Workout
from workout_ai_service.services.notification_log import NotificationLogRepository


@pytest_asyncio.fixture()
async def repository(tmp_path):
    engine, session_factory = create_async_engine_and_session(f"sqlite+aiosqlite:///{tmp_path / 'workout_ai.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield NotificationLogRepository(session_factory)
    await engine.dispose()


@pytest.mark.asyncio
async def test_add_persists_workout_snapshot(repository):
    workout = Workout.model_validate(workout_payload(rationale="Recover.", estimated_calories=312))

    entry = await repository.add(user_id="u1", email_sent_to="one@example.com", workout=workout)

    assert entry.id is not None
    assert entry.sent_at is not None
    assert entry.email_sent_to == "one@example.com"
    assert entry.workout_data == workout


@pytest.mark.asyncio
async def test_list_for_user_is_scoped_and_newest_first(repository):
    first = Workout.model_validate(workout_payload(title="Monday"))
    second = Workout.model_validate(workout_payload(title="Tuesday"))
    other = Workout.model_validate(workout_payload(title="Someone else"))

    await repository.add(user_id="u1", email_sent_to="one@example.com", workout=first)
    await repository.add(user_id="u2", email_sent_to="two@example.com", workout=other)
    await repository.add(user_id="u1", email_sent_to="one@example.com", workout=second)

    entries = await repository.list_for_user("u1")

    assert [e.workout_data.title for e in entries] == ["Tuesday", "Monday"]
    assert await repository.list_for_user("nobody") == []
    assert len(await repository.list_for_user("u1", limit=1)) == 1


def test_sent_at_is_stamped_by_the_database():
    column = NotificationLog.__table__.c.sent_at
    assert column.default is None
    assert column.server_default is not None
    assert not column.nullable

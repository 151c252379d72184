from functools import lru_cache
from urllib.parse import urlparse

import structlog
from backend_common.database import create_async_engine_and_session
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from .config import Settings, get_settings
from .exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


def _database_url(settings: Settings) -> str:
    database_url = settings.WORKOUT_AI_DATABASE_URL
    if not database_url:
        raise ConfigurationError("WORKOUT_AI_DATABASE_URL environment variable is not set")
    parsed = urlparse(database_url)
    logger.info("database_configured", scheme=parsed.scheme, url=parsed._replace(netloc="***").geturl())
    return database_url


@lru_cache()
def get_engine_and_session() -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Process-wide engine for the API, which serves every request from one event loop."""
    return create_async_engine_and_session(_database_url(get_settings()), autoflush=False, pool_pre_ping=True)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return get_engine_and_session()[1]


def open_task_database(settings: Settings) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Engine for one Celery task run.

    Every task run gets a new event loop from ``asyncio.run`` and asyncpg
    connections are bound to the loop that opened them, so nothing is pooled
    across runs. The caller disposes the engine when the run ends.
    """
    return create_async_engine_and_session(_database_url(settings), autoflush=False, poolclass=NullPool)

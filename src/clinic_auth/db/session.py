"""
clinic_auth.db.session

Async SQLAlchemy engine + session factory helpers.

Responsibilities:
- Create the async engine from settings.
- Create the async sessionmaker with safe defaults.
- Provide a store scope for work that runs outside a request (last-login touches).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from clinic_auth.db.repositories.admins import AdminRepo
from clinic_auth.db.repositories.users import UserRepo
from clinic_auth.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    # pool_pre_ping helps detect stale connections in long-lived processes.
    return create_async_engine(
        settings.database_url,
        pool_pre_ping=True,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False avoids surprising lazy loads after commits.
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


def principal_store_scope(session_factory: async_sessionmaker[AsyncSession]):
    """
    Build a zero-argument scope opener yielding `(AdminRepo, UserRepo)` bound to a
    fresh session, suitable for `LastLoginRecorder`.
    """

    @asynccontextmanager
    async def _scope() -> AsyncIterator[tuple[AdminRepo, UserRepo]]:
        async with session_factory() as session:
            yield AdminRepo(session), UserRepo(session)

    return _scope


# --- Module Notes -----------------------------------------------------------
# The API layer scopes request sessions via FastAPI dependencies (`api.deps.db_session`).

"""
clinic_auth.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and shared hashing/recording services.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinic_auth.auth.hashing import BoundedHasher
from clinic_auth.auth.resolver import LastLoginRecorder
from clinic_auth.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app factory receives explicit settings; prefer them over the env-cached instance.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created on app startup in `clinic_auth.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def hasher_dep(request: Request) -> BoundedHasher:
    return request.app.state.hasher  # type: ignore[attr-defined]


def last_login_recorder_dep(request: Request) -> LastLoginRecorder:
    return request.app.state.last_login_recorder  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session

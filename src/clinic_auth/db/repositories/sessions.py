"""
clinic_auth.db.repositories.sessions

Repository for `AuthSession` rows (server-held session store).

Responsibilities:
- Persist and fetch session descriptors by keyed token digest.
- Delete single sessions and purge expired ones; each call commits on its own.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_auth.db.models import AuthSession
from clinic_auth.db.repositories import store_errors


class SessionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, *, key: str, descriptor: dict[str, Any], expires_at: datetime) -> None:
        with store_errors("session"):
            self._session.add(AuthSession(key=key, descriptor=descriptor, expires_at=expires_at))
            await self._session.commit()

    async def get(self, key: str) -> AuthSession | None:
        stmt = (
            select(AuthSession)
            .where(AuthSession.key == key)
            .execution_options(populate_existing=True)
        )
        with store_errors("session"):
            return (await self._session.execute(stmt)).scalar_one_or_none()

    async def delete(self, key: str) -> None:
        # Deleting a missing key is a no-op, which keeps logout idempotent.
        with store_errors("session"):
            await self._session.execute(delete(AuthSession).where(AuthSession.key == key))
            await self._session.commit()

    async def purge_expired(self, now: datetime) -> int:
        with store_errors("session"):
            result = await self._session.execute(
                delete(AuthSession).where(AuthSession.expires_at <= now)
            )
            await self._session.commit()
        return result.rowcount or 0

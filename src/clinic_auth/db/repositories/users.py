"""
clinic_auth.db.repositories.users

Repository for `UserAccount` rows (user store).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_auth.auth.models import UserPrincipal
from clinic_auth.db.models import UserAccount
from clinic_auth.db.repositories import store_errors


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_email(self, email: str) -> UserPrincipal | None:
        stmt = select(UserAccount).where(func.lower(UserAccount.email) == email.lower())
        with store_errors("user"):
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return row.to_principal() if row is not None else None

    async def get_by_id(self, user_id: int) -> UserPrincipal | None:
        stmt = (
            select(UserAccount)
            .where(UserAccount.id == user_id)
            .execution_options(populate_existing=True)
        )
        with store_errors("user"):
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return row.to_principal() if row is not None else None

    async def list_all(self, *, limit: int = 200) -> list[UserPrincipal]:
        stmt = select(UserAccount).order_by(UserAccount.id).limit(limit)
        with store_errors("user"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [row.to_principal() for row in rows]

    async def touch_last_login(self, user_id: int, at: datetime) -> None:
        stmt = update(UserAccount).where(UserAccount.id == user_id).values(last_login=at)
        with store_errors("user"):
            await self._session.execute(stmt)
            await self._session.commit()

"""
clinic_auth.db.repositories.admins

Repository for `AdminAccount` rows (administrator store).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_auth.auth.models import AdminPrincipal
from clinic_auth.db.models import AdminAccount
from clinic_auth.db.repositories import store_errors


class AdminRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_email(self, email: str) -> AdminPrincipal | None:
        stmt = select(AdminAccount).where(func.lower(AdminAccount.email) == email.lower())
        with store_errors("admin"):
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return row.to_principal() if row is not None else None

    async def get_by_id(self, admin_id: int) -> AdminPrincipal | None:
        # populate_existing: a restore must see the row as it is now, not as this session cached it.
        stmt = (
            select(AdminAccount)
            .where(AdminAccount.id == admin_id)
            .execution_options(populate_existing=True)
        )
        with store_errors("admin"):
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return row.to_principal() if row is not None else None

    async def touch_last_login(self, admin_id: int, at: datetime) -> None:
        # Single UPDATE statement; concurrent logins race harmlessly (last write wins).
        stmt = update(AdminAccount).where(AdminAccount.id == admin_id).values(last_login=at)
        with store_errors("admin"):
            await self._session.execute(stmt)
            await self._session.commit()

"""
tests.conftest

Shared fixtures: per-test SQLite database, app with managed lifespan, HTTP client,
and an account seeder that writes principal rows directly.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import datetime, timedelta

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinic_auth.api.app import create_app
from clinic_auth.auth.hashing import CredentialHasher
from clinic_auth.auth.models import AdminPrincipal, Role, UserPrincipal, utcnow
from clinic_auth.auth.sessions import SessionManager
from clinic_auth.db.init_db import init_db
from clinic_auth.db.models import AdminAccount, UserAccount
from clinic_auth.db.repositories.admins import AdminRepo
from clinic_auth.db.repositories.sessions import SessionRepo
from clinic_auth.db.repositories.users import UserRepo
from clinic_auth.db.session import create_engine, create_sessionmaker
from clinic_auth.settings import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'clinic_auth.db'}",
        session_secret="test-session-secret-0123456789abcdef",
        hash_workers=2,
        log_level="WARNING",
    )


@pytest.fixture(scope="session")
def hasher() -> CredentialHasher:
    return CredentialHasher()


@pytest_asyncio.fixture
async def session_factory(settings: Settings) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def app(settings: Settings, session_factory):
    app = create_app(settings=settings)
    # httpx's ASGITransport does not run lifespan events; drive them explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


class Clock:
    """Settable clock for expiry tests."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class Accounts:
    """Writes admin/user rows the way the clinic backend would."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], hasher: CredentialHasher):
        self._session_factory = session_factory
        self._hasher = hasher

    async def admin(
        self,
        *,
        email: str,
        password: str,
        is_active: bool = True,
        id: int | None = None,
    ) -> AdminPrincipal:
        row = AdminAccount(
            id=id,
            email=email,
            password=self._hasher.hash(password),
            first_name="Ada",
            last_name="Admin",
            is_active=is_active,
        )
        async with self._session_factory() as s:
            s.add(row)
            await s.commit()
            return row.to_principal()

    async def user(
        self,
        *,
        email: str,
        password: str,
        role: Role = Role.user,
        is_active: bool = True,
        id: int | None = None,
    ) -> UserPrincipal:
        row = UserAccount(
            id=id,
            email=email,
            password=self._hasher.hash(password),
            first_name="Sam",
            last_name="Staff",
            role=role,
            is_active=is_active,
        )
        async with self._session_factory() as s:
            s.add(row)
            await s.commit()
            return row.to_principal()

    async def update_user(self, user_id: int, **values) -> None:
        async with self._session_factory() as s:
            await s.execute(update(UserAccount).where(UserAccount.id == user_id).values(**values))
            await s.commit()

    async def update_admin(self, admin_id: int, **values) -> None:
        async with self._session_factory() as s:
            await s.execute(update(AdminAccount).where(AdminAccount.id == admin_id).values(**values))
            await s.commit()


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def accounts(session_factory, hasher) -> Accounts:
    return Accounts(session_factory, hasher)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as s:
        yield s


@pytest.fixture
def make_session_manager(db: AsyncSession, settings: Settings) -> Callable[..., SessionManager]:
    def _make(*, clock: Callable[[], datetime] = utcnow) -> SessionManager:
        return SessionManager(
            sessions=SessionRepo(db),
            admins=AdminRepo(db),
            users=UserRepo(db),
            signing_key=settings.session_secret,
            ttl=timedelta(seconds=settings.session_ttl_seconds),
            clock=clock,
        )

    return _make

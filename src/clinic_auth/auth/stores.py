"""
clinic_auth.auth.stores

Collaborator interfaces consumed by the auth core.

Responsibilities:
- Describe the lookups the resolver and session manager need from the
  administrator, user and session stores, independent of the ORM.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from clinic_auth.auth.models import AdminPrincipal, UserPrincipal


class AdministratorStore(Protocol):
    async def get_by_email(self, email: str) -> AdminPrincipal | None: ...

    async def get_by_id(self, admin_id: int) -> AdminPrincipal | None: ...

    async def touch_last_login(self, admin_id: int, at: datetime) -> None: ...


class UserStore(Protocol):
    async def get_by_email(self, email: str) -> UserPrincipal | None: ...

    async def get_by_id(self, user_id: int) -> UserPrincipal | None: ...

    async def touch_last_login(self, user_id: int, at: datetime) -> None: ...


class StoredSession(Protocol):
    descriptor: dict[str, Any]
    expires_at: datetime


class SessionStore(Protocol):
    async def add(self, *, key: str, descriptor: dict[str, Any], expires_at: datetime) -> None: ...

    async def get(self, key: str) -> StoredSession | None: ...

    async def delete(self, key: str) -> None: ...

    async def purge_expired(self, now: datetime) -> int: ...


# --- Module Notes -----------------------------------------------------------
# Implementations live in `clinic_auth.db.repositories`. Store methods raise
# `StoreUnavailable` on infrastructure failure and return None for misses.

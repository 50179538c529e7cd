"""
clinic_auth.auth.resolver

Credential-to-principal resolution.

Responsibilities:
- Resolve an (email, password) pair against the administrator store, then the user store.
- Record `last_login` on the originating store without delaying the login response.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import assert_never

from clinic_auth.auth.hashing import BoundedHasher
from clinic_auth.auth.models import AdminPrincipal, Principal, UserPrincipal, utcnow
from clinic_auth.auth.stores import AdministratorStore, UserStore
from clinic_auth.observability.logging import get_logger

log = get_logger(__name__)

StoreScope = Callable[[], AbstractAsyncContextManager[tuple[AdministratorStore, UserStore]]]


def normalize_email(email: str) -> str:
    return email.strip().lower()


class LastLoginRecorder:
    """
    Fire-and-forget `last_login` writes.

    Each touch opens its own store scope (and therefore its own DB session), so
    it never shares a connection with the request that triggered it.
    """

    def __init__(self, open_stores: StoreScope, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._open_stores = open_stores
        self._clock = clock
        self._pending: set[asyncio.Task[None]] = set()

    def schedule(self, principal: Principal) -> asyncio.Task[None]:
        task = asyncio.create_task(self._touch(principal, self._clock()))
        # Hold a strong reference until done; the event loop only keeps weak ones.
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _touch(self, principal: Principal, at: datetime) -> None:
        try:
            async with self._open_stores() as (admins, users):
                if isinstance(principal, AdminPrincipal):
                    await admins.touch_last_login(principal.id, at)
                elif isinstance(principal, UserPrincipal):
                    await users.touch_last_login(principal.id, at)
                else:
                    assert_never(principal)
        except Exception as e:
            # Last-write-wins bookkeeping; a failed touch must not surface to the caller.
            log.warning(
                "last_login_touch_failed",
                principal_kind=principal.kind,
                principal_id=principal.id,
                error=str(e),
            )


class PrincipalResolver:
    """
    Resolves credentials to exactly one principal variant, or None.

    Administrators are consulted first: when an email exists in both stores and
    the password matches the administrator record, the administrator identity wins.
    """

    def __init__(
        self,
        *,
        admins: AdministratorStore,
        users: UserStore,
        hasher: BoundedHasher,
        recorder: LastLoginRecorder | None = None,
    ) -> None:
        self._admins = admins
        self._users = users
        self._hasher = hasher
        self._recorder = recorder

    async def resolve(self, email: str, secret: str) -> Principal | None:
        email = normalize_email(email)
        if not email or not secret:
            return None

        principal = await self._match(email, secret)
        if principal is not None and self._recorder is not None:
            self._recorder.schedule(principal)
        return principal

    async def _match(self, email: str, secret: str) -> Principal | None:
        admin = await self._admins.get_by_email(email)
        if admin is not None and await self._hasher.verify(admin.password_hash, secret):
            return admin

        user = await self._users.get_by_email(email)
        if user is not None and await self._hasher.verify(user.password_hash, secret):
            return user

        return None


# --- Module Notes -----------------------------------------------------------
# Store errors (`StoreUnavailable`) propagate from `resolve`; only credential
# mismatches are folded into a None result.

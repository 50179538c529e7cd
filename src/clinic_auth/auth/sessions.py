"""
clinic_auth.auth.sessions

Server-held sessions.

Responsibilities:
- Issue opaque session tokens that reference a principal by `{principalId, principalKind}` only.
- Restore the live principal from its store on every call (no caching).
- Destroy sessions idempotently and purge expired ones.
"""

from __future__ import annotations

import hashlib
import hmac
import re
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Final

from clinic_auth.auth.models import Principal, SessionDescriptor, utcnow
from clinic_auth.auth.stores import AdministratorStore, SessionStore, UserStore
from clinic_auth.observability.logging import get_logger

log = get_logger(__name__)

TOKEN_BYTES: Final[int] = 32
# token_urlsafe(32) yields 43 base64url characters; allow some slack for future sizes.
_TOKEN_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9_-]{32,128}")


class SessionManager:
    def __init__(
        self,
        *,
        sessions: SessionStore,
        admins: AdministratorStore,
        users: UserStore,
        signing_key: str,
        ttl: timedelta,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._sessions = sessions
        self._admins = admins
        self._users = users
        self._signing_key = signing_key.encode("utf-8")
        self._ttl = ttl
        self._clock = clock

    @staticmethod
    def is_well_formed(token: str | None) -> bool:
        return token is not None and _TOKEN_RE.fullmatch(token) is not None

    async def create(self, principal: Principal) -> str:
        token = secrets.token_urlsafe(TOKEN_BYTES)
        descriptor = SessionDescriptor.for_principal(principal)
        await self._sessions.add(
            key=self._key(token),
            descriptor=descriptor.to_payload(),
            expires_at=self._clock() + self._ttl,
        )
        log.info("session_created", principal_kind=principal.kind, principal_id=principal.id)
        return token

    async def restore(self, token: str | None) -> Principal | None:
        if not self.is_well_formed(token):
            return None
        key = self._key(token)
        stored = await self._sessions.get(key)
        if stored is None:
            return None

        if stored.expires_at <= self._clock():
            await self._drop(key, reason="expired")
            return None

        descriptor = SessionDescriptor.parse(stored.descriptor)
        if descriptor is None:
            await self._drop(key, reason="bad_descriptor")
            return None

        principal = await self._load(descriptor)
        if principal is None:
            await self._drop(key, reason="principal_missing")
            return None
        return principal

    async def destroy(self, token: str | None) -> None:
        if not self.is_well_formed(token):
            return
        await self._sessions.delete(self._key(token))
        log.info("session_destroyed")

    async def purge_expired(self) -> int:
        return await self._sessions.purge_expired(self._clock())

    async def _load(self, descriptor: SessionDescriptor) -> Principal | None:
        if descriptor.principal_kind == "admin":
            return await self._admins.get_by_id(descriptor.principal_id)
        return await self._users.get_by_id(descriptor.principal_id)

    async def _drop(self, key: str, *, reason: str) -> None:
        log.info("session_restore_failed", reason=reason)
        await self._sessions.delete(key)

    def _key(self, token: str) -> str:
        # Only a keyed digest of the token is stored; a leaked table cannot be replayed.
        return hmac.new(self._signing_key, token.encode("ascii"), hashlib.sha256).hexdigest()


# --- Module Notes -----------------------------------------------------------
# Restore is uncached: a deactivation or role change in the store
# applies on the very next request.

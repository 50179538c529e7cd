"""
clinic_auth.auth.authorizer

Per-request authorization checks.

Responsibilities:
- Pure rule functions over an already-restored principal.
- `RoleAuthorizer`: restore the session, apply the rules, return the principal
  as the request's explicit auth context.
"""

from __future__ import annotations

from typing import assert_never

from clinic_auth.auth.errors import (
    AccountInactive,
    InsufficientRole,
    MalformedSession,
    Unauthenticated,
)
from clinic_auth.auth.models import AdminPrincipal, Principal, Role, UserPrincipal, role_satisfies
from clinic_auth.auth.sessions import SessionManager
from clinic_auth.observability.logging import get_logger

log = get_logger(__name__)


def check_active(principal: Principal) -> Principal:
    if not principal.is_active:
        raise AccountInactive()
    return principal


def check_role(principal: Principal, min_role: Role) -> Principal:
    if isinstance(principal, AdminPrincipal):
        # Administrators sit outside the user role hierarchy and pass every role check.
        # This mirrors the existing deployment; it is not an oversight in this function.
        return principal
    if isinstance(principal, UserPrincipal):
        if not role_satisfies(principal.role, min_role):
            raise InsufficientRole(required=min_role.value, current=principal.role.value)
        return principal
    assert_never(principal)


def check_self_or_admin(principal: Principal, target_id: int) -> Principal:
    if isinstance(principal, AdminPrincipal):
        return principal
    if isinstance(principal, UserPrincipal):
        if principal.id != target_id:
            raise InsufficientRole("Admin role or self-access required")
        return principal
    assert_never(principal)


class RoleAuthorizer:
    """
    Fail-closed checks keyed by session token. Every method returns the live
    principal on success and raises an `AuthError` subclass otherwise.
    """

    def __init__(self, sessions: SessionManager) -> None:
        self._sessions = sessions

    async def require_authenticated(self, token: str | None) -> Principal:
        if not token:
            raise Unauthenticated()
        if not self._sessions.is_well_formed(token):
            raise MalformedSession()
        principal = await self._sessions.restore(token)
        if principal is None:
            raise Unauthenticated()
        return self._guard(check_active, principal)

    async def require_role(self, token: str | None, min_role: Role) -> Principal:
        principal = await self.require_authenticated(token)
        return self._guard(check_role, principal, min_role)

    async def require_self_or_admin(self, token: str | None, target_id: int) -> Principal:
        principal = await self.require_authenticated(token)
        return self._guard(check_self_or_admin, principal, target_id)

    @staticmethod
    def _guard(check, principal: Principal, *args) -> Principal:
        try:
            return check(principal, *args)
        except (AccountInactive, InsufficientRole) as e:
            log.info(
                "access_denied",
                reason=e.code,
                principal_kind=principal.kind,
                principal_id=principal.id,
            )
            raise

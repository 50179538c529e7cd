"""
clinic_auth.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Read the session reference from the session cookie.
- Build the resolver, session manager and authorizer over request-scoped stores.
- Enforce authentication and RBAC via reusable dependency factories that hand
  the restored `Principal` to the endpoint as an explicit argument.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_auth.api.deps import db_session, hasher_dep, last_login_recorder_dep, settings_dep
from clinic_auth.auth.authorizer import RoleAuthorizer
from clinic_auth.auth.hashing import BoundedHasher
from clinic_auth.auth.models import Principal, Role
from clinic_auth.auth.resolver import LastLoginRecorder, PrincipalResolver
from clinic_auth.auth.sessions import SessionManager
from clinic_auth.db.repositories.admins import AdminRepo
from clinic_auth.db.repositories.sessions import SessionRepo
from clinic_auth.db.repositories.users import UserRepo
from clinic_auth.settings import Settings


def session_token(request: Request, settings: Settings = Depends(settings_dep)) -> str | None:
    return request.cookies.get(settings.session_cookie_name)


def get_resolver(
    session: AsyncSession = Depends(db_session),
    hasher: BoundedHasher = Depends(hasher_dep),
    recorder: LastLoginRecorder = Depends(last_login_recorder_dep),
) -> PrincipalResolver:
    return PrincipalResolver(
        admins=AdminRepo(session),
        users=UserRepo(session),
        hasher=hasher,
        recorder=recorder,
    )


def get_session_manager(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> SessionManager:
    return SessionManager(
        sessions=SessionRepo(session),
        admins=AdminRepo(session),
        users=UserRepo(session),
        signing_key=settings.session_secret,
        ttl=timedelta(seconds=settings.session_ttl_seconds),
    )


def get_authorizer(sessions: SessionManager = Depends(get_session_manager)) -> RoleAuthorizer:
    return RoleAuthorizer(sessions)


def require_role(min_role: Role):
    async def _dep(
        token: str | None = Depends(session_token),
        authorizer: RoleAuthorizer = Depends(get_authorizer),
    ) -> Principal:
        return await authorizer.require_role(token, min_role)

    return _dep


async def require_self_or_admin(
    user_id: int,
    token: str | None = Depends(session_token),
    authorizer: RoleAuthorizer = Depends(get_authorizer),
) -> Principal:
    # `user_id` is the path parameter of the protected route.
    return await authorizer.require_self_or_admin(token, user_id)


# --- Module Notes -----------------------------------------------------------
# Errors raised here are `AuthError` subclasses; `api.app` renders them.

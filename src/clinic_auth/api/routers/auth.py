"""
clinic_auth.api.routers.auth

Login, logout and current-principal endpoints.

Responsibilities:
- Map resolver/session outcomes to the error taxonomy (401 vs 403).
- Issue and clear the session cookie.
- Serialize principals without credential material.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, assert_never

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from clinic_auth.api.deps import settings_dep
from clinic_auth.auth.deps import get_resolver, get_session_manager, session_token
from clinic_auth.auth.errors import AccountInactive, InvalidCredentials, Unauthenticated
from clinic_auth.auth.models import AdminPrincipal, Principal, Role, UserPrincipal
from clinic_auth.auth.resolver import PrincipalResolver
from clinic_auth.auth.sessions import SessionManager
from clinic_auth.observability.logging import get_logger
from clinic_auth.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=1024)


class PrincipalResponse(BaseModel):
    id: int
    kind: Literal["admin", "user"]
    email: str
    first_name: str
    last_name: str
    is_active: bool
    last_login: datetime | None
    role: Role | None = None

    @classmethod
    def from_principal(cls, principal: Principal) -> PrincipalResponse:
        if isinstance(principal, AdminPrincipal):
            role = None
        elif isinstance(principal, UserPrincipal):
            role = principal.role
        else:
            assert_never(principal)
        return cls(
            id=principal.id,
            kind=principal.kind,
            email=principal.email,
            first_name=principal.first_name,
            last_name=principal.last_name,
            is_active=principal.is_active,
            last_login=principal.last_login,
            role=role,
        )


@router.post("/login", response_model=PrincipalResponse)
async def login(
    body: LoginRequest,
    response: Response,
    resolver: PrincipalResolver = Depends(get_resolver),
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(settings_dep),
) -> PrincipalResponse:
    principal = await resolver.resolve(body.email, body.password)
    if principal is None:
        log.info("login_rejected")
        raise InvalidCredentials()
    if not principal.is_active:
        log.info("login_inactive", principal_kind=principal.kind, principal_id=principal.id)
        raise AccountInactive()

    token = await sessions.create(principal)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    log.info("login_succeeded", principal_kind=principal.kind, principal_id=principal.id)
    return PrincipalResponse.from_principal(principal)


@router.post("/logout")
async def logout(
    response: Response,
    token: str | None = Depends(session_token),
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(settings_dep),
) -> dict[str, str]:
    # Succeeds whether or not the presented session was ever valid.
    await sessions.destroy(token)
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    return {"status": "ok"}


@router.get("/user", response_model=PrincipalResponse)
async def current_principal(
    token: str | None = Depends(session_token),
    sessions: SessionManager = Depends(get_session_manager),
) -> PrincipalResponse:
    principal = await sessions.restore(token)
    if principal is None:
        raise Unauthenticated()
    return PrincipalResponse.from_principal(principal)

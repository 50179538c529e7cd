"""
clinic_auth.api.routers.users

Read-only staff endpoints guarded by the role authorizer.

Responsibilities:
- List staff accounts (user role `admin`, or any administrator).
- Fetch one staff account (the account holder, or any administrator).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from clinic_auth.api.deps import db_session
from clinic_auth.api.routers.auth import PrincipalResponse
from clinic_auth.auth.deps import require_role, require_self_or_admin
from clinic_auth.auth.models import Principal, Role
from clinic_auth.db.repositories.users import UserRepo

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=list[PrincipalResponse])
async def list_users(
    limit: int = Query(default=200, ge=1, le=1000),
    _principal: Principal = Depends(require_role(Role.admin)),
    session: AsyncSession = Depends(db_session),
) -> list[PrincipalResponse]:
    users = await UserRepo(session).list_all(limit=limit)
    return [PrincipalResponse.from_principal(u) for u in users]


@router.get("/{user_id}", response_model=PrincipalResponse)
async def get_user(
    user_id: int,
    _principal: Principal = Depends(require_self_or_admin),
    session: AsyncSession = Depends(db_session),
) -> PrincipalResponse:
    user = await UserRepo(session).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return PrincipalResponse.from_principal(user)

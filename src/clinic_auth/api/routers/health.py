"""
clinic_auth.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with DB connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_auth.api.deps import db_session
from clinic_auth.auth.errors import StoreUnavailable

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    # The principal and session stores share this database.
    try:
        await session.execute(text("SELECT 1"))
    except (OperationalError, InterfaceError) as e:
        raise StoreUnavailable("database unreachable") from e
    return {"status": "ready"}

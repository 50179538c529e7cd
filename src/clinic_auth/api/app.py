"""
clinic_auth.api.app

FastAPI app factory for the clinic auth service.

Responsibilities:
- Build the FastAPI application and register routers, middleware and the auth error handler.
- Initialize and dispose shared infrastructure (DB engine, hashing pool, last-login recorder).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clinic_auth import __version__
from clinic_auth.api.routers.auth import router as auth_router
from clinic_auth.api.routers.health import router as health_router
from clinic_auth.api.routers.users import router as users_router
from clinic_auth.auth.errors import AuthError, StoreUnavailable
from clinic_auth.auth.hashing import BoundedHasher, CredentialHasher
from clinic_auth.auth.resolver import LastLoginRecorder
from clinic_auth.auth.sessions import SessionManager
from clinic_auth.db.init_db import init_db
from clinic_auth.db.repositories.admins import AdminRepo
from clinic_auth.db.repositories.sessions import SessionRepo
from clinic_auth.db.repositories.users import UserRepo
from clinic_auth.db.session import create_engine, create_sessionmaker, principal_store_scope
from clinic_auth.observability.logging import configure_logging, get_logger
from clinic_auth.observability.middleware import RequestContextMiddleware
from clinic_auth.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        if settings.session_secret_is_weak:
            log.warning("session_secret_weak", hint="use at least 32 random characters")

        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.hasher = BoundedHasher(
            CredentialHasher(),
            max_concurrency=settings.hash_workers,
        )
        app.state.last_login_recorder = LastLoginRecorder(
            principal_store_scope(app.state.sessionmaker)
        )
        if settings.env in ("dev", "test"):
            # Prod schemas are owned by the clinic backend's migrations.
            await init_db(engine)
        await _purge_expired_sessions(app, settings)

        try:
            yield
        finally:
            await app.state.last_login_recorder.drain()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Clinic Auth",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(AuthError, _auth_error_handler)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(users_router)

    return app


async def _auth_error_handler(_: Request, exc: AuthError) -> JSONResponse:
    if isinstance(exc, StoreUnavailable):
        # Infrastructure detail stays in the logs; clients get a generic 500.
        log.error("store_unavailable", error=exc.detail, cause=repr(exc.__cause__))
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "detail": StoreUnavailable.default_detail},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _purge_expired_sessions(app: FastAPI, settings: Settings) -> None:
    async with app.state.sessionmaker() as session:
        sessions = SessionManager(
            sessions=SessionRepo(session),
            admins=AdminRepo(session),
            users=UserRepo(session),
            signing_key=settings.session_secret,
            ttl=timedelta(seconds=settings.session_ttl_seconds),
        )
        purged = await sessions.purge_expired()
    log.info("expired_sessions_purged", count=purged)

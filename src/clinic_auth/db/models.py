"""
clinic_auth.db.models

Persistence schema read by the auth core.

Responsibilities:
- Define ORM models for the two principal tables and server-held sessions:
  - AdminAccount: system administrators (`admins`)
  - UserAccount: clinic staff with a hierarchical role (`users`)
  - AuthSession: session key -> `{principalId, principalKind}` descriptor
- Convert account rows into domain principals (the only place that does).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from clinic_auth.auth.models import AdminPrincipal, Role, UserPrincipal, utcnow
from clinic_auth.db.base import Base


class AdminAccount(Base):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(512), nullable=False)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    last_login: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_principal(self) -> AdminPrincipal:
        return AdminPrincipal(
            id=self.id,
            email=self.email,
            password_hash=self.password,
            is_active=self.is_active,
            last_login=self.last_login,
            first_name=self.first_name,
            last_name=self.last_name,
        )


class UserAccount(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(512), nullable=False)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    # Stored as the enum value ("user", "doctor", ...) so the column stays readable by other services.
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=32, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.user,
    )
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    last_login: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_principal(self) -> UserPrincipal:
        return UserPrincipal(
            id=self.id,
            email=self.email,
            password_hash=self.password,
            is_active=self.is_active,
            last_login=self.last_login,
            role=self.role,
            first_name=self.first_name,
            last_name=self.last_name,
        )


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    # HMAC of the client token; the token itself is never stored.
    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    descriptor: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    __table_args__ = (Index("ix_auth_sessions_expires_at", "expires_at"),)


# --- Module Notes -----------------------------------------------------------
# `admins` and `users` are owned by the clinic backend; this service only reads
# them and writes `last_login`.

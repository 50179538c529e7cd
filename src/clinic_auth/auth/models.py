"""
clinic_auth.auth.models

Auth domain models.

Responsibilities:
- Define the ordered user `Role` enum and its single comparison primitive.
- Define the two-variant `Principal` (administrator or user-with-role).
- Define the persisted session descriptor and its validation boundary.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

PrincipalKind = Literal["admin", "user"]


def utcnow() -> datetime:
    # Naive UTC throughout: SQLite drops tzinfo, and mixed comparisons raise.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class Role(enum.StrEnum):
    # Declaration order is the hierarchy, lowest first.
    user = "user"
    receptionist = "receptionist"
    doctor = "doctor"
    admin = "admin"

    @property
    def rank(self) -> int:
        return _ROLE_ORDER.index(self)


_ROLE_ORDER: tuple[Role, ...] = tuple(Role)


def rank(role: Role) -> int:
    return role.rank


def role_satisfies(held: Role, required: Role) -> bool:
    """
    The one comparison used for role checks: `held` grants everything `required` does.
    """

    return rank(held) >= rank(required)


@dataclass(frozen=True, slots=True)
class AdminPrincipal:
    """
    System administrator, loaded from the `admins` store.
    """

    kind: ClassVar[PrincipalKind] = "admin"

    id: int
    email: str
    password_hash: str = field(repr=False)
    is_active: bool
    last_login: datetime | None
    first_name: str = ""
    last_name: str = ""


@dataclass(frozen=True, slots=True)
class UserPrincipal:
    """
    Clinic staff member, loaded from the `users` store. Carries a hierarchical role.
    """

    kind: ClassVar[PrincipalKind] = "user"

    id: int
    email: str
    password_hash: str = field(repr=False)
    is_active: bool
    last_login: datetime | None
    role: Role
    first_name: str = ""
    last_name: str = ""


Principal = AdminPrincipal | UserPrincipal


class SessionDescriptor(BaseModel):
    """
    Minimal persisted reference to a principal. Mutable principal fields
    (active flag, role) are absent; they are re-read on restore.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    principal_id: int = Field(alias="principalId", strict=True)
    principal_kind: PrincipalKind = Field(alias="principalKind")

    @classmethod
    def for_principal(cls, principal: Principal) -> SessionDescriptor:
        return cls(principal_id=principal.id, principal_kind=principal.kind)

    @classmethod
    def parse(cls, payload: Any) -> SessionDescriptor | None:
        # Single deserialization point for stored payloads; anything off-shape is rejected.
        try:
            return cls.model_validate(payload)
        except ValidationError:
            return None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# --- Module Notes -----------------------------------------------------------
# Consumers branch on both principal variants with `isinstance` and finish with
# `typing.assert_never` so adding a third variant fails type checking everywhere.

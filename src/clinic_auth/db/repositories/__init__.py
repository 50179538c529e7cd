"""
clinic_auth.db.repositories

Repository package.

Responsibilities:
- Implement the administrator, user and session store protocols of `clinic_auth.auth.stores`.
- Translate connectivity failures into `StoreUnavailable`.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import InterfaceError, OperationalError

from clinic_auth.auth.errors import StoreUnavailable


@contextmanager
def store_errors(store: str) -> Iterator[None]:
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        raise StoreUnavailable(f"{store} store unavailable") from e


# --- Module Notes -----------------------------------------------------------
# Repositories are thin; auth rules live in `clinic_auth.auth`.

"""
clinic_auth.auth.errors

Authentication/authorization error taxonomy.

Responsibilities:
- Give every denial a stable machine-readable code and HTTP status.
- Separate expected client-visible denials from the fatal `StoreUnavailable`.
"""

from __future__ import annotations

from typing import Any

from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class AuthError(Exception):
    status_code: int = HTTP_403_FORBIDDEN
    code: str = "forbidden"
    default_detail: str = "Access denied"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_body(self) -> dict[str, Any]:
        return {"error": self.code, "detail": self.detail}


class InvalidCredentials(AuthError):
    status_code = HTTP_401_UNAUTHORIZED
    code = "invalid_credentials"
    default_detail = "Invalid email or password"


class AccountInactive(AuthError):
    status_code = HTTP_403_FORBIDDEN
    code = "account_inactive"
    default_detail = "Account is deactivated"


class Unauthenticated(AuthError):
    status_code = HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_detail = "Authentication required"


class MalformedSession(AuthError):
    status_code = HTTP_401_UNAUTHORIZED
    code = "malformed_session"
    default_detail = "Malformed session reference"


class InsufficientRole(AuthError):
    status_code = HTTP_403_FORBIDDEN
    code = "insufficient_role"
    default_detail = "Insufficient permissions"

    def __init__(
        self,
        detail: str | None = None,
        *,
        required: str | None = None,
        current: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.required = required
        self.current = current

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        if self.required is not None:
            body["required"] = self.required
            body["current"] = self.current
        return body


class StoreUnavailable(AuthError):
    """
    Infrastructure failure talking to a principal or session store. Fatal for the request.
    """

    status_code = HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"
    default_detail = "Internal server error"


# --- Module Notes -----------------------------------------------------------
# The hasher and resolver never raise these for failed logins; they return
# False/None and the HTTP layer picks the error (see `api.routers.auth`).

"""
clinic_auth.auth

Authentication/authorization package.

Responsibilities:
- Credential hashing and verification.
- Principal resolution across the administrator and user stores.
- Server-held sessions and per-request role checks (FastAPI dependencies).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Modules here depend on store protocols (`auth.stores`), not on the ORM layer,
# except `auth.deps` which is the composition point for the HTTP boundary.

"""
clinic_auth.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and the store repositories used by the auth core.
"""

# Package marker.

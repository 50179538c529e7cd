"""
clinic_auth.api

API package for the clinic auth service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and request/response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request validation + auth dependencies + delegation to `clinic_auth.auth`.

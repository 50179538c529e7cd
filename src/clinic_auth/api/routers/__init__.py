"""
clinic_auth.api.routers

HTTP routers: auth (login/logout/current principal), users, health.
"""

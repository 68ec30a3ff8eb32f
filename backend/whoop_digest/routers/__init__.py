"""API routers package."""

from whoop_digest.routers import auth, data, notes

__all__ = ["auth", "data", "notes"]

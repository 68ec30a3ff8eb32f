"""Services package for business logic."""

from whoop_digest.services.auth_service import WhoopTokenService, token_service
from whoop_digest.services.fetch_service import FetchService
from whoop_digest.services.note_service import NoteService
from whoop_digest.services.render_service import RenderService, render_service
from whoop_digest.services.stats_service import StatsService, stats_service
from whoop_digest.services.whoop_client import WhoopClient

__all__ = [
    "WhoopTokenService",
    "token_service",
    "FetchService",
    "NoteService",
    "RenderService",
    "render_service",
    "StatsService",
    "stats_service",
    "WhoopClient",
]

"""FastAPI dependencies and upstream error mapping."""

import logging

from fastapi import Depends, HTTPException, status

from whoop_digest.services.auth_service import WhoopAuthError, WhoopTokenService, token_service
from whoop_digest.services.calendar_service import InvalidDateError
from whoop_digest.services.fetch_service import FetchService
from whoop_digest.services.note_service import NoteService
from whoop_digest.services.whoop_client import (
    WhoopAPIError,
    WhoopClient,
    WhoopNotFoundError,
    WhoopRateLimitError,
)

logger = logging.getLogger(__name__)


def get_token_service() -> WhoopTokenService:
    """Dependency to get the token service."""
    return token_service


def get_whoop_client(tokens: WhoopTokenService = Depends(get_token_service)) -> WhoopClient:
    """Dependency to get a WHOOP client that reads the current token per request."""
    return WhoopClient(token_provider=tokens.get_valid_token)


def get_fetch_service(client: WhoopClient = Depends(get_whoop_client)) -> FetchService:
    """Dependency to get the day assembly service."""
    return FetchService(client)


def get_note_service(fetch_service: FetchService = Depends(get_fetch_service)) -> NoteService:
    """Dependency to get the note service."""
    return NoteService(fetch_service)


def to_http_exception(exc: Exception) -> HTTPException:
    """
    Map a service error to the HTTP error returned to API callers.

    - InvalidDateError -> 422
    - WhoopAuthError -> 401
    - WhoopRateLimitError -> 503 with Retry-After
    - WhoopNotFoundError -> 404
    - WhoopAPIError -> 502
    """
    if isinstance(exc, InvalidDateError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, WhoopAuthError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)
    if isinstance(exc, WhoopRateLimitError):
        logger.error(f"WHOOP rate limit exhausted: {exc.message}")
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=exc.message,
            headers={"Retry-After": "60"},
        )
    if isinstance(exc, WhoopNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    if isinstance(exc, WhoopAPIError):
        logger.error(f"WHOOP API error: {exc.message}")
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to fetch data from WHOOP: {exc.message}",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# Errors the routers translate with to_http_exception
SERVICE_ERRORS = (InvalidDateError, WhoopAuthError, WhoopAPIError)

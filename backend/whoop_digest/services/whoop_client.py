"""
WHOOP API integration client.

Handles authenticated requests against the WHOOP developer API, including
rate-limit backoff and cursor pagination over time-bounded collections.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from whoop_digest.config import settings
from whoop_digest.schemas.whoop import (
    BodyMeasurements,
    Cycle,
    PaginatedResponse,
    Recovery,
    Sleep,
    UserProfile,
    Workout,
)
from whoop_digest.services.calendar_service import to_api_timestamp

logger = logging.getLogger(__name__)

CYCLE_PATH = "/cycle"
RECOVERY_PATH = "/recovery"
SLEEP_PATH = "/activity/sleep"
WORKOUT_PATH = "/activity/workout"
PROFILE_PATH = "/user/profile/basic"
BODY_MEASUREMENT_PATH = "/user/measurement/body"


class WhoopAPIError(Exception):
    """Exception raised when the WHOOP API returns an error."""

    def __init__(
        self,
        message: str,
        status_code: int = None,
        path: str = None,
        response_body: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.path = path
        self.response_body = response_body
        super().__init__(self.message)


class WhoopRateLimitError(WhoopAPIError):
    """Exception raised when a request is still rate limited after all retries."""

    def __init__(self, path: str, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"WHOOP API rate limit exceeded for {path}",
            status_code=429,
            path=path,
        )


class WhoopNotFoundError(WhoopAPIError):
    """Exception raised when a single (non-paginated) resource does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Not found: {path}", status_code=404, path=path)


class RequestState(str, Enum):
    """Non-terminal states of a single request's retry loop."""

    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    BACKOFF = "backoff"


class OutcomeKind(str, Enum):
    """Terminal states of a single request's retry loop."""

    SUCCEEDED = "succeeded"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


@dataclass(frozen=True)
class RequestOutcome:
    """Result of one logical request, after any retries."""

    kind: OutcomeKind
    path: str
    attempts: int
    status_code: Optional[int] = None
    body: Any = None
    error: Optional[str] = None


TokenProvider = Callable[[], Awaitable[str]]


class WhoopClient:
    """
    Client for the WHOOP developer API.

    The access token is read at the moment each request is issued, either
    from a fixed string or from an async ``token_provider`` that may refresh
    it behind the scenes.

    Attributes:
        base_url: WHOOP API base URL
        max_retries: Number of retries after a 429 response
        retry_delay: First backoff delay in seconds, doubled on every retry
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        base_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if access_token is None and token_provider is None:
            raise ValueError("Either access_token or token_provider is required")
        self._access_token = access_token
        self._token_provider = token_provider
        self.base_url = base_url or settings.WHOOP_API_BASE_URL
        self.max_retries = settings.WHOOP_MAX_RETRIES if max_retries is None else max_retries
        self.retry_delay = settings.WHOOP_RETRY_DELAY if retry_delay is None else retry_delay
        self.timeout = timeout or settings.WHOOP_REQUEST_TIMEOUT
        self._transport = transport
        self._sleep = sleep

    async def _current_token(self) -> str:
        if self._token_provider is not None:
            return await self._token_provider()
        return self._access_token

    async def _make_request(self, path: str, params: dict = None) -> RequestOutcome:
        """
        Issue a GET and drive it to a terminal outcome.

        The loop moves IDLE -> AWAITING_RESPONSE, and on a 429 response
        AWAITING_RESPONSE -> BACKOFF -> AWAITING_RESPONSE, with the backoff
        delay doubling each time, until one of the terminal outcomes:

        - SUCCEEDED: 2xx with a JSON body
        - NOT_FOUND: 404
        - RATE_LIMITED: still 429 after ``max_retries`` retries
        - FAILED: any other status, an unreadable body or a transport error

        Args:
            path: Resource path relative to the base URL
            params: Optional query parameters

        Returns:
            RequestOutcome: The terminal outcome, never raises for HTTP errors
        """
        state = RequestState.IDLE
        attempts = 0
        delay = self.retry_delay

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            while True:
                if state is RequestState.BACKOFF:
                    logger.warning(
                        f"WHOOP rate limit hit for {path}. Attempt {attempts}/{self.max_retries + 1}. "
                        f"Retrying in {delay:.1f}s"
                    )
                    await self._sleep(delay)
                    delay *= 2

                state = RequestState.AWAITING_RESPONSE
                attempts += 1
                headers = {
                    "Authorization": f"Bearer {await self._current_token()}",
                    "Accept": "application/json",
                }

                try:
                    response = await client.get(path, params=params, headers=headers)
                except httpx.HTTPError as e:
                    logger.error(f"WHOOP API request error for {path}: {str(e)}")
                    return RequestOutcome(
                        kind=OutcomeKind.FAILED,
                        path=path,
                        attempts=attempts,
                        error=f"Request failed: {str(e)}",
                    )

                status_code = response.status_code

                if status_code == 429:
                    if attempts <= self.max_retries:
                        state = RequestState.BACKOFF
                        continue
                    return RequestOutcome(
                        kind=OutcomeKind.RATE_LIMITED,
                        path=path,
                        attempts=attempts,
                        status_code=status_code,
                    )

                if status_code == 404:
                    return RequestOutcome(
                        kind=OutcomeKind.NOT_FOUND,
                        path=path,
                        attempts=attempts,
                        status_code=status_code,
                    )

                if status_code < 200 or status_code >= 300:
                    try:
                        error_body = response.json()
                    except ValueError:
                        error_body = {"raw": response.text}
                    logger.error(f"WHOOP API error: {status_code} for {path}")
                    return RequestOutcome(
                        kind=OutcomeKind.FAILED,
                        path=path,
                        attempts=attempts,
                        status_code=status_code,
                        body=error_body,
                        error=f"WHOOP API returned {status_code} for {path}",
                    )

                try:
                    body = response.json()
                except ValueError:
                    return RequestOutcome(
                        kind=OutcomeKind.FAILED,
                        path=path,
                        attempts=attempts,
                        status_code=status_code,
                        body={"raw": response.text},
                        error=f"WHOOP API returned invalid JSON for {path}",
                    )

                return RequestOutcome(
                    kind=OutcomeKind.SUCCEEDED,
                    path=path,
                    attempts=attempts,
                    status_code=status_code,
                    body=body,
                )

    @staticmethod
    def _raise_for_outcome(outcome: RequestOutcome) -> None:
        """Convert a non-successful outcome into the matching exception."""
        if outcome.kind is OutcomeKind.RATE_LIMITED:
            raise WhoopRateLimitError(path=outcome.path, attempts=outcome.attempts)
        if outcome.kind is OutcomeKind.NOT_FOUND:
            raise WhoopNotFoundError(outcome.path)
        if outcome.kind is OutcomeKind.FAILED:
            raise WhoopAPIError(
                message=outcome.error or f"WHOOP API request failed for {outcome.path}",
                status_code=outcome.status_code,
                path=outcome.path,
                response_body=outcome.body,
            )

    async def get(self, path: str, params: dict = None) -> Any:
        """
        Fetch a single resource.

        Raises:
            WhoopNotFoundError: If the resource does not exist
            WhoopRateLimitError: If still rate limited after retries
            WhoopAPIError: If the API returns any other error
        """
        outcome = await self._make_request(path, params)
        self._raise_for_outcome(outcome)
        return outcome.body

    async def fetch_all(self, path: str, start: datetime, end: datetime) -> list[dict]:
        """
        Fetch every record of a collection within ``[start, end)``.

        Pages are requested one after another, passing the previous page's
        ``next_token`` as ``nextToken`` until a page comes back without one.
        A 404 means the member has no such collection: the records gathered
        so far (usually none) are returned.

        Args:
            path: Collection path, e.g. ``/cycle``
            start: Inclusive window start
            end: Exclusive window end

        Returns:
            list: Raw record dicts in API order

        Raises:
            WhoopRateLimitError: If any page is still rate limited after retries
            WhoopAPIError: If any page fails with another status
        """
        records: list[dict] = []
        next_token: Optional[str] = None
        pages = 0

        while True:
            params = {
                "start": to_api_timestamp(start),
                "end": to_api_timestamp(end),
            }
            if next_token:
                params["nextToken"] = next_token

            outcome = await self._make_request(path, params)

            if outcome.kind is OutcomeKind.NOT_FOUND:
                logger.debug(f"No {path} collection, returning {len(records)} records")
                return records
            self._raise_for_outcome(outcome)

            try:
                page = PaginatedResponse.model_validate(outcome.body)
            except ValidationError as e:
                raise WhoopAPIError(
                    f"Malformed page from {path}: {str(e)}",
                    status_code=outcome.status_code,
                    path=path,
                    response_body=outcome.body,
                )

            pages += 1
            records.extend(page.records)
            if not page.next_token:
                break
            next_token = page.next_token

        logger.debug(f"Fetched {len(records)} records from {path} in {pages} page(s)")
        return records

    async def _fetch_records(self, model, path: str, start: datetime, end: datetime) -> list:
        records = await self.fetch_all(path, start, end)
        try:
            return [model.model_validate(r) for r in records]
        except ValidationError as e:
            raise WhoopAPIError(f"Malformed record from {path}: {str(e)}", path=path)

    async def get_cycles(self, start: datetime, end: datetime) -> list[Cycle]:
        return await self._fetch_records(Cycle, CYCLE_PATH, start, end)

    async def get_recoveries(self, start: datetime, end: datetime) -> list[Recovery]:
        return await self._fetch_records(Recovery, RECOVERY_PATH, start, end)

    async def get_sleeps(self, start: datetime, end: datetime) -> list[Sleep]:
        return await self._fetch_records(Sleep, SLEEP_PATH, start, end)

    async def get_workouts(self, start: datetime, end: datetime) -> list[Workout]:
        return await self._fetch_records(Workout, WORKOUT_PATH, start, end)

    async def _get_resource(self, model, path: str):
        body = await self.get(path)
        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise WhoopAPIError(f"Malformed response from {path}: {str(e)}", path=path, response_body=body)

    async def get_user_profile(self) -> UserProfile:
        """Get the authenticated member's basic profile."""
        return await self._get_resource(UserProfile, PROFILE_PATH)

    async def get_body_measurements(self) -> BodyMeasurements:
        """Get the authenticated member's body measurements."""
        return await self._get_resource(BodyMeasurements, BODY_MEASUREMENT_PATH)

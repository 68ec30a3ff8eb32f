"""Data API router for assembled days, aggregated statistics and member profile."""

import logging

from fastapi import APIRouter, Depends, Query

from whoop_digest.config import settings
from whoop_digest.dependencies import SERVICE_ERRORS, get_fetch_service, get_whoop_client, to_http_exception
from whoop_digest.schemas.stats import DayData, PersonaData, WeekStats
from whoop_digest.schemas.whoop import BodyMeasurements, UserProfile
from whoop_digest.services.calendar_service import parse_date, utc_today
from whoop_digest.services.fetch_service import FetchService
from whoop_digest.services.stats_service import stats_service
from whoop_digest.services.whoop_client import WhoopClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/days/{date}", response_model=DayData)
async def get_day(
    date: str,
    fetch_service: FetchService = Depends(get_fetch_service),
) -> DayData:
    """
    Get all WHOOP records for one UTC calendar day.

    Args:
        date: Day in YYYY-MM-DD format
        fetch_service: Day assembly service

    Returns:
        The joined day; cycle/recovery are null and lists empty on rest days

    Raises:
        HTTPException: 422 for a malformed date, 502/503 on upstream failure
    """
    try:
        return await fetch_service.get_day_data(parse_date(date))
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)


@router.get("/weeks/{date}", response_model=WeekStats)
async def get_week(
    date: str,
    fetch_service: FetchService = Depends(get_fetch_service),
) -> WeekStats:
    """
    Get weekly statistics for the ISO week (Monday to Sunday) containing a date.

    Args:
        date: Any day of the week in YYYY-MM-DD format
        fetch_service: Day assembly service

    Returns:
        Weekly statistics over the seven days
    """
    try:
        days = await fetch_service.get_week(parse_date(date))
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)
    return stats_service.build_week_stats(days)


@router.get("/persona", response_model=PersonaData)
async def get_persona(
    days: int = Query(settings.PERSONA_DAYS, ge=1, le=90, description="Number of days to summarise"),
    fetch_service: FetchService = Depends(get_fetch_service),
) -> PersonaData:
    """
    Get the rolling persona summary for the days ending today (UTC).

    Args:
        days: Window length, 30 by default
        fetch_service: Day assembly service

    Returns:
        Persona summary including the HRV trend
    """
    today = utc_today()
    try:
        window = await fetch_service.get_recent_days(today, days)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)
    return stats_service.build_persona_data(window, generated=today)


@router.get("/profile", response_model=UserProfile)
async def get_profile(client: WhoopClient = Depends(get_whoop_client)) -> UserProfile:
    """Get the authenticated member's basic profile."""
    try:
        return await client.get_user_profile()
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)


@router.get("/body", response_model=BodyMeasurements)
async def get_body(client: WhoopClient = Depends(get_whoop_client)) -> BodyMeasurements:
    """
    Get the authenticated member's body measurements.

    Raises:
        HTTPException: 404 if WHOOP has no measurements, 502/503 on upstream failure
    """
    try:
        return await client.get_body_measurements()
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

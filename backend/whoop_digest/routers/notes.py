"""Notes API router for writing daily, weekly and persona notes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from whoop_digest.config import settings
from whoop_digest.dependencies import SERVICE_ERRORS, get_note_service, to_http_exception
from whoop_digest.schemas.notes import BackfillResponse, NoteResponse
from whoop_digest.services.calendar_service import parse_date, utc_today
from whoop_digest.services.note_service import NoteService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/daily", response_model=NoteResponse)
async def generate_daily_note(
    date: Optional[str] = Query(None, description="Day in YYYY-MM-DD format, defaults to today (UTC)"),
    note_service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """Generate (or overwrite) the daily note for a day."""
    try:
        day = parse_date(date) if date else utc_today()
        return await note_service.generate_daily(day)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)


@router.post("/weekly", response_model=NoteResponse)
async def generate_weekly_note(
    date: Optional[str] = Query(None, description="Any day of the week, defaults to today (UTC)"),
    note_service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """Generate (or overwrite) the weekly note for the ISO week containing a day."""
    try:
        day = parse_date(date) if date else utc_today()
        return await note_service.generate_weekly(day)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)


@router.post("/persona", response_model=NoteResponse)
async def generate_persona_note(
    note_service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """Generate the rolling health persona note."""
    try:
        return await note_service.generate_persona()
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)


@router.post("/backfill", response_model=BackfillResponse)
async def backfill_daily_notes(
    days: int = Query(settings.BACKFILL_DEFAULT_DAYS, ge=1, le=365, description="Number of days to backfill"),
    note_service: NoteService = Depends(get_note_service),
) -> BackfillResponse:
    """
    Write daily notes for the last N days, skipping any that already exist.

    Args:
        days: Number of days ending today (UTC)
        note_service: Note generation service

    Returns:
        Counts of written and skipped notes
    """
    logger.info(f"Backfilling {days} day(s)")
    try:
        return await note_service.backfill(days)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

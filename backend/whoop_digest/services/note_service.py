"""Note generation service: fetch, aggregate, render and write notes to the vault."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from whoop_digest.config import settings
from whoop_digest.schemas.notes import BackfillResponse, NoteResponse
from whoop_digest.services.calendar_service import (
    add_days,
    iso_week_start,
    start_of_day,
    utc_today,
)
from whoop_digest.services.fetch_service import FetchService
from whoop_digest.services.render_service import (
    daily_note_path,
    persona_note_path,
    render_service,
    weekly_note_path,
)
from whoop_digest.services.stats_service import stats_service

logger = logging.getLogger(__name__)


class NoteService:
    """
    Generate WHOOP notes into a folder of markdown files.

    Note paths are relative to the vault root and are stable per day or
    week, so regenerating a note overwrites it in place.

    Attributes:
        vault_path: Root directory of the vault
        output_folder: Vault-relative folder for all WHOOP notes
    """

    def __init__(
        self,
        fetch_service: FetchService,
        vault_path: Optional[str] = None,
        output_folder: Optional[str] = None,
    ):
        self.fetch_service = fetch_service
        self.vault_path = Path(vault_path or settings.VAULT_PATH)
        self.output_folder = (output_folder or settings.OUTPUT_FOLDER).rstrip("/")

    async def note_exists(self, path: str) -> bool:
        return await asyncio.to_thread((self.vault_path / path).is_file)

    async def write_note(self, path: str, content: str) -> NoteResponse:
        """Write a note, creating parent folders and overwriting any existing file."""
        target = self.vault_path / path

        def _write() -> bool:
            created = not target.exists()
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            return created

        created = await asyncio.to_thread(_write)
        logger.info(f"{'Created' if created else 'Updated'} note {path}")
        return NoteResponse(path=path, created=created)

    async def generate_daily(self, date: datetime) -> NoteResponse:
        """Fetch one day and write its daily note."""
        day = start_of_day(date)
        data = await self.fetch_service.get_day_data(day)
        content = render_service.render_daily(data)
        return await self.write_note(daily_note_path(day, self.output_folder), content)

    async def generate_weekly(self, date: datetime) -> NoteResponse:
        """Fetch the ISO week containing ``date`` and write its weekly note."""
        monday = iso_week_start(date)
        days = await self.fetch_service.get_week(monday)
        stats = stats_service.build_week_stats(days)
        content = render_service.render_weekly(stats)
        return await self.write_note(weekly_note_path(monday, self.output_folder), content)

    async def generate_persona(
        self,
        today: Optional[datetime] = None,
        days: Optional[int] = None,
    ) -> NoteResponse:
        """Fetch the last ``days`` days ending today and write the persona note."""
        today = start_of_day(today) if today else utc_today()
        window = await self.fetch_service.get_recent_days(today, days or settings.PERSONA_DAYS)
        persona = stats_service.build_persona_data(window, generated=today)
        content = render_service.render_persona(persona)
        return await self.write_note(persona_note_path(self.output_folder), content)

    async def backfill(self, n: int, today: Optional[datetime] = None) -> BackfillResponse:
        """
        Write daily notes for the last ``n`` days, oldest first.

        Days that already have a note are skipped without fetching. Days are
        processed one at a time; a failure stops the backfill and leaves the
        notes written so far in place.
        """
        today = start_of_day(today) if today else utc_today()
        written: list[str] = []
        skipped = 0

        for i in range(n - 1, -1, -1):
            day = add_days(today, -i)
            path = daily_note_path(day, self.output_folder)
            if await self.note_exists(path):
                skipped += 1
                continue
            data = await self.fetch_service.get_day_data(day)
            await self.write_note(path, render_service.render_daily(data))
            written.append(path)

        logger.info(f"Backfill complete: {len(written)} written, {skipped} skipped")
        return BackfillResponse(written=len(written), skipped=skipped, paths=written)

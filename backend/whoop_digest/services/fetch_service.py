"""Assembly of per-day WHOOP data from the four resource streams."""

import asyncio
import logging
from datetime import datetime, timedelta

from whoop_digest.schemas.stats import DayData
from whoop_digest.services.calendar_service import (
    add_days,
    format_date,
    iso_week_start,
    start_of_day,
)
from whoop_digest.services.whoop_client import WhoopClient

logger = logging.getLogger(__name__)


class FetchService:
    """Join cycles, recoveries, sleeps and workouts into ``DayData`` records."""

    # A night's sleep usually starts before the cycle boundary it ends in.
    SLEEP_LOOKBACK = timedelta(hours=24)

    def __init__(self, client: WhoopClient):
        self.client = client

    async def get_day_data(self, date: datetime) -> DayData:
        """
        Fetch and join everything WHOOP has for one UTC calendar day.

        The first cycle returned for ``[day, day+1)`` is authoritative. When
        there is none, the day is a rest/no-data day and nothing else is
        fetched. Otherwise recoveries, sleeps and workouts are fetched
        concurrently over the cycle's window (sleeps reach 24h further back),
        and the recovery whose ``cycle_id`` matches the cycle is kept.

        Args:
            date: Any instant on the target day

        Returns:
            DayData: The joined day

        Raises:
            WhoopAPIError: If any of the underlying fetches fails
        """
        day = start_of_day(date)
        next_day = add_days(day, 1)

        cycles = await self.client.get_cycles(day, next_day)
        if not cycles:
            logger.debug(f"No cycle for {format_date(day)}")
            return DayData(date=day, cycle=None, recovery=None, sleeps=[], workouts=[])

        cycle = cycles[0]
        cycle_start = cycle.start
        cycle_end = cycle.end or next_day

        recoveries, sleeps, workouts = await asyncio.gather(
            self.client.get_recoveries(cycle_start, cycle_end),
            self.client.get_sleeps(cycle_start - self.SLEEP_LOOKBACK, cycle_end),
            self.client.get_workouts(cycle_start, cycle_end),
        )

        recovery = next((r for r in recoveries if r.cycle_id == cycle.id), None)

        return DayData(
            date=day,
            cycle=cycle,
            recovery=recovery,
            sleeps=sleeps,
            workouts=workouts,
        )

    async def get_days(self, start: datetime, n: int) -> list[DayData]:
        """
        Fetch ``n`` consecutive days beginning at ``start``.

        All days are fetched concurrently; results keep chronological order.
        A failure on any day fails the whole call.
        """
        first = start_of_day(start)
        days = [add_days(first, i) for i in range(n)]
        logger.info(f"Fetching {n} day(s) from {format_date(first)}")
        return list(await asyncio.gather(*(self.get_day_data(d) for d in days)))

    async def get_recent_days(self, end_date: datetime, n: int) -> list[DayData]:
        """Fetch the ``n`` days ending at (and including) ``end_date``."""
        return await self.get_days(add_days(start_of_day(end_date), -(n - 1)), n)

    async def get_week(self, date: datetime) -> list[DayData]:
        """Fetch Monday through Sunday of the ISO week containing ``date``."""
        return await self.get_days(iso_week_start(date), 7)

"""Builders for WHOOP API payloads and schema objects used across tests."""

import json
from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx

from whoop_digest.schemas.stats import DayData
from whoop_digest.schemas.whoop import Cycle, Recovery, Sleep, Workout


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def cycle_payload(**overrides) -> dict:
    payload = {
        "id": 1,
        "user_id": 42,
        "created_at": "2026-02-22T08:00:00.000Z",
        "updated_at": "2026-02-22T23:00:00.000Z",
        "start": "2026-02-22T08:00:00.000Z",
        "end": "2026-02-22T23:00:00.000Z",
        "timezone_offset": "-05:00",
        "score_state": "SCORED",
        "score": {
            "strain": 12.4,
            "kilojoule": 8500,
            "average_heart_rate": 68,
            "max_heart_rate": 152,
        },
    }
    payload.update(overrides)
    return payload


def recovery_payload(recovery_score: float = 78, hrv: float = 67.3, **overrides) -> dict:
    payload = {
        "cycle_id": 1,
        "sleep_id": "abc-123",
        "user_id": 42,
        "created_at": "2026-02-22T08:00:00.000Z",
        "updated_at": "2026-02-22T08:30:00.000Z",
        "score_state": "SCORED",
        "score": {
            "user_calibrating": False,
            "recovery_score": recovery_score,
            "resting_heart_rate": 52,
            "hrv_rmssd_milli": hrv,
            "spo2_percentage": 98.1,
            "skin_temp_celsius": 34.2,
        },
    }
    payload.update(overrides)
    return payload


def sleep_payload(in_bed_ms: int = 25200000, performance: float = 85, **overrides) -> dict:
    payload = {
        "id": "sleep-1",
        "v1_id": None,
        "user_id": 42,
        "start": "2026-02-22T02:00:00.000Z",
        "end": "2026-02-22T09:00:00.000Z",
        "timezone_offset": "-05:00",
        "nap": False,
        "score_state": "SCORED",
        "score": {
            "stage_summary": {
                "total_in_bed_time_milli": in_bed_ms,
                "total_awake_time_milli": 1800000,
                "total_no_data_time_milli": 0,
                "total_light_sleep_time_milli": 9000000,
                "total_slow_wave_sleep_time_milli": 5400000,
                "total_rem_sleep_time_milli": 7200000,
                "sleep_cycle_count": 4,
                "disturbance_count": 2,
            },
            "sleep_needed": {
                "baseline_milli": 27900000,
                "need_from_sleep_debt_milli": 0,
                "need_from_recent_strain_milli": 1800000,
                "need_from_recent_nap_milli": 0,
            },
            "respiratory_rate": 15.2,
            "sleep_performance_percentage": performance,
            "sleep_consistency_percentage": 72,
            "sleep_efficiency_percentage": 92,
        },
    }
    payload.update(overrides)
    return payload


def workout_payload(**overrides) -> dict:
    payload = {
        "id": "workout-1",
        "v1_id": None,
        "user_id": 42,
        "start": "2026-02-22T12:00:00.000Z",
        "end": "2026-02-22T13:00:00.000Z",
        "timezone_offset": "-05:00",
        "sport_id": 0,
        "sport_name": "running",
        "score_state": "SCORED",
        "score": {
            "strain": 8.7,
            "average_heart_rate": 142,
            "max_heart_rate": 168,
            "kilojoule": 2200,
            "percent_recorded": 99,
            "distance_meter": 8046,
            "altitude_gain_meter": 45,
            "altitude_change_meter": 5,
            "zone_duration": {},
        },
    }
    payload.update(overrides)
    return payload


def make_day(
    date: datetime = None,
    recovery_score: float = 78,
    hrv: float = 67.3,
    **overrides,
) -> DayData:
    """A fully populated day; pass cycle=None, recovery=None, sleeps=[] etc. to strip parts."""
    fields = {
        "date": date or utc(2026, 2, 22),
        "cycle": Cycle.model_validate(cycle_payload()),
        "recovery": Recovery.model_validate(recovery_payload(recovery_score, hrv)),
        "sleeps": [Sleep.model_validate(sleep_payload())],
        "workouts": [Workout.model_validate(workout_payload())],
    }
    fields.update(overrides)
    return DayData(**fields)


def make_sleep(**overrides) -> Sleep:
    return Sleep.model_validate(sleep_payload(**overrides))


def page(records: list, next_token: str = None) -> dict:
    body = {"records": records}
    if next_token is not None:
        body["next_token"] = next_token
    return body


class FakeWhoopAPI:
    """
    Scriptable stand-in for the WHOOP API behind an ``httpx.MockTransport``.

    ``routes`` maps a path (e.g. ``/cycle``) to a callable taking the request
    and returning ``(status, body)``. Every request is recorded.
    """

    def __init__(self, routes: dict[str, Callable[[httpx.Request], tuple]] = None):
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/developer/v2")
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        status, body = route(request)
        if isinstance(body, (dict, list)):
            return httpx.Response(status, content=json.dumps(body), headers={"Content-Type": "application/json"})
        return httpx.Response(status, text=body or "")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [r.url.path.removeprefix("/developer/v2") for r in self.requests]


class RecordingSleep:
    """Replacement for ``asyncio.sleep`` that records delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeWhoopClient:
    """
    In-memory ``WhoopClient`` replacement that records every collection call.

    Cycles are keyed by the YYYY-MM-DD of the requested window start; the
    other collections are returned whole for any window. ``fail_on`` names a
    collection whose call raises ``error``.
    """

    def __init__(
        self,
        cycles_by_day: dict[str, list] = None,
        recoveries: list = None,
        sleeps: list = None,
        workouts: list = None,
        fail_on: str = None,
        error: Exception = None,
    ):
        self.cycles_by_day = cycles_by_day or {}
        self.recoveries = recoveries or []
        self.sleeps = sleeps or []
        self.workouts = workouts or []
        self.fail_on = fail_on
        self.error = error
        self.calls: list[tuple[str, datetime, datetime]] = []

    def _record(self, name: str, start: datetime, end: datetime) -> None:
        self.calls.append((name, start, end))
        if name == self.fail_on:
            raise self.error

    def call_names(self) -> list[str]:
        return [name for name, _, _ in self.calls]

    async def get_cycles(self, start, end):
        self._record("cycles", start, end)
        return self.cycles_by_day.get(start.strftime("%Y-%m-%d"), [])

    async def get_recoveries(self, start, end):
        self._record("recoveries", start, end)
        return self.recoveries

    async def get_sleeps(self, start, end):
        self._record("sleeps", start, end)
        return self.sleeps

    async def get_workouts(self, start, end):
        self._record("workouts", start, end)
        return self.workouts


class FakeFetchService:
    """
    ``FetchService`` replacement returning canned days.

    ``days`` maps YYYY-MM-DD to a ``DayData``; any other date comes back as
    an empty rest day. Dates listed in ``fail_dates`` raise ``error``.
    """

    def __init__(self, days: dict[str, DayData] = None, fail_dates=(), error: Exception = None):
        self.days = days or {}
        self.fail_dates = set(fail_dates)
        self.error = error
        self.requested: list[str] = []

    async def get_day_data(self, date: datetime) -> DayData:
        key = date.strftime("%Y-%m-%d")
        self.requested.append(key)
        if key in self.fail_dates:
            raise self.error
        return self.days.get(key) or DayData(date=date)

    async def get_days(self, start: datetime, n: int) -> list[DayData]:
        return [await self.get_day_data(start + timedelta(days=i)) for i in range(n)]

    async def get_recent_days(self, end_date: datetime, n: int) -> list[DayData]:
        return await self.get_days(end_date - timedelta(days=n - 1), n)

    async def get_week(self, date: datetime) -> list[DayData]:
        monday = date - timedelta(days=date.isoweekday() - 1)
        return await self.get_days(monday, 7)

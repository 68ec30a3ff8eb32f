"""Pydantic schemas for assembled days and aggregated statistics."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from whoop_digest.schemas.whoop import Cycle, Recovery, Sleep, Workout


class IsoWeek(BaseModel):
    """ISO-8601 week key."""

    week: int = Field(..., ge=1, le=53, description="ISO week number")
    year: int = Field(..., description="ISO week-numbering year")

    class Config:
        frozen = True


class DayData(BaseModel):
    """All WHOOP records attributed to one UTC calendar day."""

    date: datetime = Field(..., description="UTC midnight of the day")
    cycle: Optional[Cycle] = None
    recovery: Optional[Recovery] = None
    sleeps: list[Sleep] = Field(default_factory=list)
    workouts: list[Workout] = Field(default_factory=list)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "date": "2026-02-22T00:00:00Z",
                "cycle": None,
                "recovery": None,
                "sleeps": [],
                "workouts": [],
            }
        }


class WeekStats(BaseModel):
    """Summary statistics over an ordered run of days."""

    week_start: str = Field("", description="First day, YYYY-MM-DD")
    week_end: str = Field("", description="Last day, YYYY-MM-DD")
    days: list[DayData] = Field(default_factory=list)
    avg_recovery: float = 0.0
    avg_hrv: float = 0.0
    avg_rhr: float = 0.0
    avg_strain: float = 0.0
    avg_sleep_millis: float = 0.0
    total_workouts: int = 0
    green_days: int = 0
    yellow_days: int = 0
    red_days: int = 0
    best_day: Optional[DayData] = None
    worst_day: Optional[DayData] = None

    class Config:
        frozen = True


class HrvTrend(BaseModel):
    """Classified linear trend of a chronological HRV series."""

    direction: str = Field(..., description="insufficient, stable, improving or declining")
    percent_per_day: Optional[float] = Field(
        None,
        description="Least-squares slope as a percentage of the mean, per day",
    )
    label: str = Field(..., description="Human-readable label")

    class Config:
        frozen = True


class PersonaData(BaseModel):
    """Rolling summary of recent days."""

    generated_date: str
    period_start: str
    period_end: str
    avg_recovery: float = 0.0
    avg_hrv: float = 0.0
    hrv_trend: str = "Insufficient data"
    avg_rhr: float = 0.0
    avg_sleep_millis: float = 0.0
    avg_sleep_performance: float = 0.0
    avg_strain: float = 0.0
    total_workouts: int = 0
    green_days: int = 0
    yellow_days: int = 0
    red_days: int = 0

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "generated_date": "2026-02-22",
                "period_start": "2026-01-24",
                "period_end": "2026-02-22",
                "avg_recovery": 61.4,
                "avg_hrv": 58.2,
                "hrv_trend": "Improving (+0.8%/day)",
                "avg_rhr": 53.1,
                "avg_sleep_millis": 26100000,
                "avg_sleep_performance": 84.0,
                "avg_strain": 11.7,
                "total_workouts": 18,
                "green_days": 12,
                "yellow_days": 14,
                "red_days": 4,
            }
        }

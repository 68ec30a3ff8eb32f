"""Pydantic schemas package for WHOOP records, statistics and API responses."""

from whoop_digest.schemas.whoop import (
    BodyMeasurements,
    Cycle,
    CycleScore,
    PaginatedResponse,
    Recovery,
    RecoveryScore,
    Sleep,
    SleepScore,
    UserProfile,
    Workout,
    WorkoutScore,
)
from whoop_digest.schemas.stats import (
    DayData,
    HrvTrend,
    IsoWeek,
    PersonaData,
    WeekStats,
)
from whoop_digest.schemas.notes import (
    AuthorizationUrlResponse,
    BackfillResponse,
    NoteResponse,
    TokenResponse,
)

__all__ = [
    # WHOOP records
    "BodyMeasurements",
    "Cycle",
    "CycleScore",
    "PaginatedResponse",
    "Recovery",
    "RecoveryScore",
    "Sleep",
    "SleepScore",
    "UserProfile",
    "Workout",
    "WorkoutScore",
    # Statistics
    "DayData",
    "HrvTrend",
    "IsoWeek",
    "PersonaData",
    "WeekStats",
    # API responses
    "AuthorizationUrlResponse",
    "BackfillResponse",
    "NoteResponse",
    "TokenResponse",
]

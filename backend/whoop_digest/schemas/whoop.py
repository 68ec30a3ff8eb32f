"""Pydantic schemas for records returned by the WHOOP developer API."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

SCORED = "SCORED"


class UserProfile(BaseModel):
    """Basic profile of the authenticated WHOOP member."""

    user_id: int = Field(..., description="WHOOP user ID")
    email: str = Field("", description="Account email")
    first_name: str = Field("", description="First name")
    last_name: str = Field("", description="Last name")


class BodyMeasurements(BaseModel):
    """Body measurements of the authenticated WHOOP member."""

    height_meter: float = Field(..., ge=0, description="Height in meters")
    weight_kilogram: float = Field(..., ge=0, description="Weight in kilograms")
    max_heart_rate: int = Field(..., ge=0, description="Max heart rate in bpm")


class CycleScore(BaseModel):
    """Strain and heart rate summary for a physiological cycle."""

    strain: float = Field(0.0, ge=0, description="Day strain (0-21)")
    kilojoule: float = Field(0.0, ge=0, description="Energy expenditure in kJ")
    average_heart_rate: int = Field(0, ge=0, description="Average heart rate in bpm")
    max_heart_rate: int = Field(0, ge=0, description="Max heart rate in bpm")


class Cycle(BaseModel):
    """A physiological cycle, WHOOP's notion of a day."""

    id: int = Field(..., description="Cycle ID")
    user_id: Optional[int] = Field(None, description="WHOOP user ID")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    start: datetime = Field(..., description="Cycle start")
    end: Optional[datetime] = Field(None, description="Cycle end, null while in progress")
    timezone_offset: str = Field("+00:00", description="Member's offset at cycle start")
    score_state: str = Field(..., description="SCORED, PENDING_SCORE or UNSCORABLE")
    score: Optional[CycleScore] = None

    @property
    def is_scored(self) -> bool:
        return self.score_state == SCORED and self.score is not None


class RecoveryScore(BaseModel):
    """Recovery readiness metrics."""

    user_calibrating: bool = False
    recovery_score: float = Field(0.0, ge=0, le=100, description="Recovery percentage")
    resting_heart_rate: float = Field(0.0, ge=0, description="Resting heart rate in bpm")
    hrv_rmssd_milli: float = Field(0.0, ge=0, description="HRV (RMSSD) in milliseconds")
    spo2_percentage: Optional[float] = Field(None, description="Blood oxygen percentage")
    skin_temp_celsius: Optional[float] = Field(None, description="Skin temperature")


class Recovery(BaseModel):
    """Recovery record, linked to exactly one cycle."""

    cycle_id: int = Field(..., description="ID of the cycle this recovery belongs to")
    sleep_id: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    score_state: str
    score: Optional[RecoveryScore] = None

    @property
    def is_scored(self) -> bool:
        return self.score_state == SCORED and self.score is not None


class SleepStageSummary(BaseModel):
    total_in_bed_time_milli: int = 0
    total_awake_time_milli: int = 0
    total_no_data_time_milli: int = 0
    total_light_sleep_time_milli: int = 0
    total_slow_wave_sleep_time_milli: int = 0
    total_rem_sleep_time_milli: int = 0
    sleep_cycle_count: int = 0
    disturbance_count: int = 0


class SleepNeeded(BaseModel):
    baseline_milli: int = 0
    need_from_sleep_debt_milli: int = 0
    need_from_recent_strain_milli: int = 0
    need_from_recent_nap_milli: int = 0


class SleepScore(BaseModel):
    """Sleep stage breakdown and performance metrics."""

    stage_summary: SleepStageSummary = Field(default_factory=SleepStageSummary)
    sleep_needed: SleepNeeded = Field(default_factory=SleepNeeded)
    respiratory_rate: Optional[float] = None
    sleep_performance_percentage: Optional[float] = None
    sleep_consistency_percentage: Optional[float] = None
    sleep_efficiency_percentage: Optional[float] = None


class Sleep(BaseModel):
    """A sleep session or nap."""

    id: str
    v1_id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    start: datetime
    end: datetime
    timezone_offset: str = "+00:00"
    nap: bool = False
    score_state: str
    score: Optional[SleepScore] = None

    @property
    def is_scored(self) -> bool:
        return self.score_state == SCORED and self.score is not None

    @property
    def in_bed_millis(self) -> int:
        if self.score is None:
            return 0
        return self.score.stage_summary.total_in_bed_time_milli


class ZoneDuration(BaseModel):
    zone_zero_milli: int = 0
    zone_one_milli: int = 0
    zone_two_milli: int = 0
    zone_three_milli: int = 0
    zone_four_milli: int = 0
    zone_five_milli: int = 0


class WorkoutScore(BaseModel):
    """Strain and heart rate metrics for a workout."""

    strain: float = 0.0
    average_heart_rate: int = 0
    max_heart_rate: int = 0
    kilojoule: float = 0.0
    percent_recorded: float = 0.0
    distance_meter: Optional[float] = None
    altitude_gain_meter: Optional[float] = None
    altitude_change_meter: Optional[float] = None
    zone_duration: ZoneDuration = Field(default_factory=ZoneDuration)


class Workout(BaseModel):
    """A recorded workout."""

    id: str
    v1_id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    start: datetime
    end: datetime
    timezone_offset: str = "+00:00"
    sport_id: int = -1
    sport_name: Optional[str] = None
    score_state: str
    score: Optional[WorkoutScore] = None


class PaginatedResponse(BaseModel):
    """A single page of a collection endpoint."""

    records: list[dict[str, Any]] = Field(default_factory=list)
    next_token: Optional[str] = Field(None, description="Cursor for the next page, absent on the last page")

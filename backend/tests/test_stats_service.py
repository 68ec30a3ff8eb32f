"""
Unit tests for weekly and persona aggregation.

Tests the per-metric averaging rules (scored records only, naps excluded),
recovery colour tiers, best/worst selection and the HRV trend classifier.
"""

import pytest

from factories import make_day, make_sleep, recovery_payload, utc
from whoop_digest.schemas.stats import DayData, WeekStats
from whoop_digest.schemas.whoop import Recovery
from whoop_digest.services.stats_service import StatsService, primary_sleep


@pytest.fixture
def service() -> StatsService:
    return StatsService()


# ======================================================================
# Helpers
# ======================================================================


def _unscored_recovery() -> Recovery:
    return Recovery.model_validate(recovery_payload(score_state="PENDING_SCORE", score=None))


def _rest_day(day: int) -> DayData:
    return DayData(date=utc(2026, 2, day))


def _week(*scores) -> list[DayData]:
    return [make_day(date=utc(2026, 2, 16 + i), recovery_score=s) for i, s in enumerate(scores)]


# ======================================================================
# Classification
# ======================================================================


class TestClassification:
    @pytest.mark.parametrize(
        "score, color",
        [(100, "green"), (67, "green"), (66.9, "yellow"), (34, "yellow"), (33.9, "red"), (0, "red")],
    )
    def test_recovery_color(self, service, score, color):
        assert service.recovery_color(score) == color

    @pytest.mark.parametrize(
        "strain, label",
        [
            (21, "All Out"),
            (18, "All Out"),
            (17.9, "Strenuous"),
            (14, "Strenuous"),
            (12.4, "Moderate"),
            (10, "Moderate"),
            (7, "Light"),
            (6.9, "Minimal"),
            (0, "Minimal"),
        ],
    )
    def test_strain_category(self, service, strain, label):
        assert service.strain_category(strain) == label


class TestPrimarySleep:
    def test_longest_non_nap(self):
        short = make_sleep(id="short", in_bed_ms=3600000)
        long_nap = make_sleep(id="nap", in_bed_ms=40000000, nap=True)
        main = make_sleep(id="main", in_bed_ms=25200000)

        assert primary_sleep([short, long_nap, main]).id == "main"

    def test_first_wins_ties(self):
        first = make_sleep(id="first")
        second = make_sleep(id="second")

        assert primary_sleep([first, second]).id == "first"

    def test_only_naps(self):
        assert primary_sleep([make_sleep(nap=True)]) is None
        assert primary_sleep([]) is None


# ======================================================================
# Weekly statistics
# ======================================================================


class TestBuildWeekStats:
    def test_empty_input(self, service):
        stats = service.build_week_stats([])

        assert stats == WeekStats()
        assert stats.week_start == ""
        assert stats.best_day is None
        assert stats.avg_recovery == 0

    def test_period_from_first_and_last_day(self, service):
        stats = service.build_week_stats(_week(70, 70, 70))

        assert stats.week_start == "2026-02-16"
        assert stats.week_end == "2026-02-18"
        assert len(stats.days) == 3

    def test_colour_distribution_and_extremes(self, service):
        days = _week(80, 50, 20)

        stats = service.build_week_stats(days)

        assert (stats.green_days, stats.yellow_days, stats.red_days) == (1, 1, 1)
        assert stats.avg_recovery == pytest.approx(50)
        assert stats.best_day.date == utc(2026, 2, 16)
        assert stats.worst_day.date == utc(2026, 2, 18)

    def test_ties_keep_the_earlier_day(self, service):
        stats = service.build_week_stats(_week(70, 90, 90, 40, 40))

        assert stats.best_day.date == utc(2026, 2, 17)
        assert stats.worst_day.date == utc(2026, 2, 19)

    def test_unscored_and_missing_recoveries_are_excluded(self, service):
        days = [
            make_day(date=utc(2026, 2, 16), recovery_score=60, hrv=40),
            make_day(date=utc(2026, 2, 17), recovery=_unscored_recovery()),
            _rest_day(18),
            make_day(date=utc(2026, 2, 19), recovery_score=80, hrv=60),
        ]

        stats = service.build_week_stats(days)

        assert stats.avg_recovery == pytest.approx(70)
        assert stats.avg_hrv == pytest.approx(50)
        assert stats.avg_rhr == pytest.approx(52)
        assert stats.green_days + stats.yellow_days + stats.red_days == 2

    def test_strain_average_over_scored_cycles_only(self, service):
        days = [make_day(date=utc(2026, 2, 16)), _rest_day(17), _rest_day(18)]

        stats = service.build_week_stats(days)

        assert stats.avg_strain == pytest.approx(12.4)

    def test_sleep_average_excludes_naps_and_unscored(self, service):
        days = [
            make_day(
                date=utc(2026, 2, 16),
                sleeps=[make_sleep(in_bed_ms=25200000), make_sleep(id="nap", in_bed_ms=3600000, nap=True)],
            ),
            make_day(
                date=utc(2026, 2, 17),
                sleeps=[
                    make_sleep(in_bed_ms=28800000),
                    make_sleep(id="pending", score_state="PENDING_SCORE", score=None),
                ],
            ),
        ]

        stats = service.build_week_stats(days)

        assert stats.avg_sleep_millis == pytest.approx(27000000)

    def test_workouts_are_counted_every_day(self, service):
        days = [make_day(date=utc(2026, 2, 16)), _rest_day(17), make_day(date=utc(2026, 2, 18), recovery=None)]

        stats = service.build_week_stats(days)

        assert stats.total_workouts == 2

    def test_all_rest_days(self, service):
        stats = service.build_week_stats([_rest_day(16), _rest_day(17)])

        assert stats.avg_recovery == 0
        assert stats.best_day is None
        assert stats.worst_day is None
        assert stats.week_start == "2026-02-16"


# ======================================================================
# HRV trend
# ======================================================================


class TestHrvTrend:
    @pytest.mark.parametrize("values", [[], [50], [50, 60]])
    def test_insufficient_data(self, service, values):
        trend = service.hrv_trend(values)

        assert trend.direction == "insufficient"
        assert trend.label == "Insufficient data"
        assert trend.percent_per_day is None

    def test_flat_series_is_stable(self, service):
        assert service.hrv_trend_label([50, 50, 50]) == "Stable"

    def test_zero_mean_is_stable(self, service):
        assert service.hrv_trend_label([0, 0, 0]) == "Stable"

    def test_improving(self, service):
        # slope 5/day over a mean of 55
        trend = service.hrv_trend([50, 55, 60])

        assert trend.direction == "improving"
        assert trend.percent_per_day == pytest.approx(100 * 5 / 55)
        assert trend.label == "Improving (+9.1%/day)"

    def test_declining_keeps_sign(self, service):
        assert service.hrv_trend_label([60, 55, 50]) == "Declining (-9.1%/day)"

    def test_small_slope_is_stable(self, service):
        trend = service.hrv_trend([100, 100.2, 100.4])

        assert trend.direction == "stable"
        assert trend.percent_per_day == pytest.approx(0.2 / 100.2 * 100)


# ======================================================================
# Persona
# ======================================================================


class TestBuildPersonaData:
    def test_summarises_window(self, service):
        days = [
            make_day(date=utc(2026, 2, 20), recovery_score=60, hrv=50),
            make_day(date=utc(2026, 2, 21), recovery_score=70, hrv=55),
            make_day(date=utc(2026, 2, 22), recovery_score=80, hrv=60),
        ]

        persona = service.build_persona_data(days, generated=utc(2026, 2, 22, 9))

        assert persona.generated_date == "2026-02-22"
        assert persona.period_start == "2026-02-20"
        assert persona.period_end == "2026-02-22"
        assert persona.avg_recovery == pytest.approx(70)
        assert persona.hrv_trend == "Improving (+9.1%/day)"
        assert persona.avg_sleep_performance == pytest.approx(85)
        assert persona.total_workouts == 3
        assert persona.green_days == 2
        assert persona.yellow_days == 1

    def test_hrv_trend_skips_days_without_scored_recovery(self, service):
        days = [
            make_day(date=utc(2026, 2, 20), hrv=50),
            _rest_day(21),
            make_day(date=utc(2026, 2, 22), hrv=60),
        ]

        persona = service.build_persona_data(days, generated=utc(2026, 2, 22))

        assert persona.hrv_trend == "Insufficient data"

    def test_sleep_performance_uses_primary_sleep(self, service):
        days = [
            make_day(
                date=utc(2026, 2, 21),
                sleeps=[make_sleep(in_bed_ms=3600000, performance=10), make_sleep(in_bed_ms=25200000, performance=90)],
            ),
            make_day(date=utc(2026, 2, 22), sleeps=[make_sleep(nap=True, performance=20)]),
        ]

        persona = service.build_persona_data(days, generated=utc(2026, 2, 22))

        assert persona.avg_sleep_performance == pytest.approx(90)

    def test_empty_window(self, service):
        persona = service.build_persona_data([], generated=utc(2026, 2, 22))

        assert persona.period_start == ""
        assert persona.avg_recovery == 0
        assert persona.hrv_trend == "Insufficient data"

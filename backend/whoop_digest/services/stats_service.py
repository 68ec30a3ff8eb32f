"""WHOOP statistics aggregation service.

This service reduces assembled days into summary structures:
- Weekly statistics (averages, recovery colour distribution, best/worst day)
- HRV trend classification (least-squares slope as %/day of the mean)
- 30-day persona (weekly reduction plus HRV trend and sleep performance)
"""

from datetime import datetime
from typing import Optional, Sequence

from whoop_digest.schemas.stats import DayData, HrvTrend, PersonaData, WeekStats
from whoop_digest.schemas.whoop import Sleep
from whoop_digest.services.calendar_service import format_date, utc_today


def _avg(total: float, count: int) -> float:
    return total / count if count else 0.0


def primary_sleep(sleeps: Sequence[Sleep]) -> Optional[Sleep]:
    """Return the longest non-nap sleep by in-bed time; the first wins ties."""
    best: Optional[Sleep] = None
    for sleep in sleeps:
        if sleep.nap:
            continue
        if best is None or sleep.in_bed_millis > best.in_bed_millis:
            best = sleep
    return best


class StatsService:
    """Aggregate WHOOP day data into weekly and persona summaries."""

    # Recovery colour tiers (inclusive lower bounds)
    GREEN_THRESHOLD = 67
    YELLOW_THRESHOLD = 34

    # Strain categories, highest first (inclusive lower bounds)
    STRAIN_CATEGORIES = (
        (18.0, "All Out"),
        (14.0, "Strenuous"),
        (10.0, "Moderate"),
        (7.0, "Light"),
    )

    # Normalised HRV slope (%/day) beyond which the trend is not "stable"
    TREND_THRESHOLD = 0.5
    MIN_TREND_POINTS = 3

    def recovery_color(self, score: float) -> str:
        """Map a recovery score to green (>= 67), yellow (34-66) or red (< 34)."""
        if score >= self.GREEN_THRESHOLD:
            return "green"
        if score >= self.YELLOW_THRESHOLD:
            return "yellow"
        return "red"

    def strain_category(self, strain: float) -> str:
        """Map a day or workout strain to its WHOOP category label."""
        for threshold, label in self.STRAIN_CATEGORIES:
            if strain >= threshold:
                return label
        return "Minimal"

    def build_week_stats(self, days: Sequence[DayData]) -> WeekStats:
        """
        Reduce an ordered run of days to weekly statistics.

        The first and last days name the period; the caller supplies the
        days in chronological order. Each metric is averaged over only the
        days that have it:

        - recovery score, HRV and RHR over days with a SCORED recovery
        - strain over days with a SCORED cycle
        - in-bed time over every SCORED non-nap sleep

        Workouts are counted on every day. Best and worst day are the days
        with the highest and lowest scored recovery; on ties the earlier day
        is kept.

        Args:
            days: Days in chronological order, possibly empty

        Returns:
            WeekStats: The summary; all zeros with empty period for no days
        """
        if not days:
            return WeekStats()

        total_rec = total_hrv = total_rhr = total_strain = 0.0
        total_sleep_ms = 0
        rec_count = strain_count = sleep_count = total_workouts = 0
        colors = {"green": 0, "yellow": 0, "red": 0}
        best_score: Optional[float] = None
        worst_score: Optional[float] = None
        best_day: Optional[DayData] = None
        worst_day: Optional[DayData] = None

        for day in days:
            total_workouts += len(day.workouts)

            if day.recovery is not None and day.recovery.is_scored:
                score = day.recovery.score
                total_rec += score.recovery_score
                total_hrv += score.hrv_rmssd_milli
                total_rhr += score.resting_heart_rate
                rec_count += 1

                colors[self.recovery_color(score.recovery_score)] += 1

                if best_score is None or score.recovery_score > best_score:
                    best_score, best_day = score.recovery_score, day
                if worst_score is None or score.recovery_score < worst_score:
                    worst_score, worst_day = score.recovery_score, day

            if day.cycle is not None and day.cycle.is_scored:
                total_strain += day.cycle.score.strain
                strain_count += 1

            for sleep in day.sleeps:
                if not sleep.nap and sleep.is_scored:
                    total_sleep_ms += sleep.in_bed_millis
                    sleep_count += 1

        return WeekStats(
            week_start=format_date(days[0].date),
            week_end=format_date(days[-1].date),
            days=list(days),
            avg_recovery=_avg(total_rec, rec_count),
            avg_hrv=_avg(total_hrv, rec_count),
            avg_rhr=_avg(total_rhr, rec_count),
            avg_strain=_avg(total_strain, strain_count),
            avg_sleep_millis=_avg(total_sleep_ms, sleep_count),
            total_workouts=total_workouts,
            green_days=colors["green"],
            yellow_days=colors["yellow"],
            red_days=colors["red"],
            best_day=best_day,
            worst_day=worst_day,
        )

    def hrv_trend(self, values: Sequence[float]) -> HrvTrend:
        """
        Classify the linear trend of a chronological HRV series.

        Fits an ordinary least-squares line against index 0..n-1 and
        expresses the slope as a percentage of the series mean, so that the
        same threshold works for any HRV baseline.

        Args:
            values: HRV values in chronological order

        Returns:
            HrvTrend: insufficient (< 3 points), stable, improving or declining
        """
        n = len(values)
        if n < self.MIN_TREND_POINTS:
            return HrvTrend(direction="insufficient", label="Insufficient data")

        sum_x = sum_y = sum_xy = sum_x2 = 0.0
        for i, value in enumerate(values):
            sum_x += i
            sum_y += value
            sum_xy += i * value
            sum_x2 += i * i

        denom = n * sum_x2 - sum_x * sum_x
        mean = sum_y / n
        if denom == 0 or mean == 0:
            return HrvTrend(direction="stable", label="Stable")

        slope = (n * sum_xy - sum_x * sum_y) / denom
        normalized = slope / mean * 100

        if normalized > self.TREND_THRESHOLD:
            return HrvTrend(
                direction="improving",
                percent_per_day=normalized,
                label=f"Improving (+{abs(normalized):.1f}%/day)",
            )
        if normalized < -self.TREND_THRESHOLD:
            return HrvTrend(
                direction="declining",
                percent_per_day=normalized,
                label=f"Declining ({normalized:.1f}%/day)",
            )
        return HrvTrend(direction="stable", percent_per_day=normalized, label="Stable")

    def hrv_trend_label(self, values: Sequence[float]) -> str:
        return self.hrv_trend(values).label

    def build_persona_data(
        self,
        days: Sequence[DayData],
        generated: Optional[datetime] = None,
    ) -> PersonaData:
        """
        Summarise a rolling window of days (normally the last 30).

        Uses the weekly reduction for averages and colour counts, then adds
        the HRV trend over days with a scored recovery and the mean sleep
        performance of each day's primary sleep.

        Args:
            days: Days in chronological order
            generated: Generation date, defaults to today (UTC)

        Returns:
            PersonaData: The persona summary
        """
        stats = self.build_week_stats(days)

        hrv_values = [
            d.recovery.score.hrv_rmssd_milli
            for d in days
            if d.recovery is not None and d.recovery.is_scored
        ]

        perf_total = 0.0
        perf_count = 0
        for day in days:
            sleep = primary_sleep(day.sleeps)
            if (
                sleep is not None
                and sleep.is_scored
                and sleep.score.sleep_performance_percentage is not None
            ):
                perf_total += sleep.score.sleep_performance_percentage
                perf_count += 1

        return PersonaData(
            generated_date=format_date(generated or utc_today()),
            period_start=stats.week_start,
            period_end=stats.week_end,
            avg_recovery=stats.avg_recovery,
            avg_hrv=stats.avg_hrv,
            hrv_trend=self.hrv_trend_label(hrv_values),
            avg_rhr=stats.avg_rhr,
            avg_sleep_millis=stats.avg_sleep_millis,
            avg_sleep_performance=_avg(perf_total, perf_count),
            avg_strain=stats.avg_strain,
            total_workouts=stats.total_workouts,
            green_days=stats.green_days,
            yellow_days=stats.yellow_days,
            red_days=stats.red_days,
        )


# Singleton instance for use across the application
stats_service = StatsService()

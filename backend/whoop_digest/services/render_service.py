"""Render service for turning WHOOP days and summaries into markdown notes."""

from types import MappingProxyType
from typing import Optional, Sequence

from whoop_digest.schemas.stats import DayData, PersonaData, WeekStats
from whoop_digest.schemas.whoop import Sleep, Workout
from whoop_digest.services.calendar_service import (
    format_date,
    format_iso_week,
    iso_week,
    next_day,
    next_week,
    parse_date,
    prev_day,
    prev_week,
    start_of_day,
)
from whoop_digest.services.stats_service import primary_sleep, stats_service

# WHOOP sport_id -> display name. Unknown ids render as Sport(<id>).
SPORT_NAMES = MappingProxyType({
    -1: "Activity",
    0: "Running",
    1: "Cycling",
    16: "Baseball",
    17: "Basketball",
    18: "Rowing",
    19: "Fencing",
    20: "Field Hockey",
    21: "Football",
    22: "Golf",
    24: "Ice Hockey",
    25: "Lacrosse",
    27: "Rugby",
    28: "Sailing",
    29: "Skiing",
    30: "Soccer",
    31: "Softball",
    32: "Squash",
    33: "Swimming",
    34: "Tennis",
    35: "Track & Field",
    36: "Volleyball",
    37: "Water Polo",
    38: "Wrestling",
    39: "Boxing",
    42: "Dance",
    43: "Pilates",
    44: "Yoga",
    45: "Weightlifting",
    47: "Cross Country Skiing",
    48: "Functional Fitness",
    49: "Duathlon",
    51: "Gymnastics",
    52: "Hiking/Rucking",
    53: "Horseback Riding",
    55: "Kayaking",
    56: "Martial Arts",
    57: "Mountain Biking",
    59: "Powerlifting",
    60: "Rock Climbing",
    61: "Paddleboarding",
    62: "Triathlon",
    63: "Walking",
    64: "Surfing",
    65: "Elliptical",
    66: "Stairmaster",
    70: "Meditation",
    71: "Other",
    73: "Diving",
    74: "Operations - Tactical",
    75: "Operations - Medical",
    76: "Operations - Flying",
    77: "Operations - Water",
    82: "Ultimate",
    83: "Climber",
    84: "Jumping Rope",
    85: "Australian Football",
    86: "Skateboarding",
    87: "Coaching",
    88: "Ice Bath",
    89: "Commuting",
    90: "Gaming",
    91: "Snowboarding",
    92: "Motocross",
    93: "Cricket",
    94: "Pickleball",
    95: "Badminton",
    96: "Obstacle Course Racing",
    97: "Motor Racing",
    98: "HIIT",
    99: "Spin",
    100: "Jiu Jitsu",
    101: "Manual Labor",
    103: "Archery",
})


# --- Formatting helpers ---

def millis_to_minutes(ms: float) -> str:
    """Format a duration in milliseconds as "7h 0m", or "30m" under an hour."""
    total_min = int(ms // 60000)
    hours, minutes = divmod(total_min, 60)
    if hours == 0:
        return f"{minutes}m"
    return f"{hours}h {minutes}m"


def fmt0(n: float) -> str:
    return f"{n:.0f}"


def fmt1(n: float) -> str:
    return f"{n:.1f}"


def sport_name(sport_id: int) -> str:
    return SPORT_NAMES.get(sport_id, f"Sport({sport_id})")


def non_nap_sleeps(sleeps: Sequence[Sleep]) -> list[tuple[int, Sleep]]:
    """Non-nap sleeps paired with their ordinal among non-nap sleeps."""
    return list(enumerate(s for s in sleeps if not s.nap))


# --- Output paths ---

def daily_note_path(date, folder: str) -> str:
    """<folder>/<year>/daily-YYYY-MM-DD.md"""
    return f"{folder}/{start_of_day(date).year}/daily-{format_date(date)}.md"


def weekly_note_path(date, folder: str) -> str:
    """<folder>/<iso-year>/weekly-YYYY-Www.md, keyed by ISO week year."""
    return f"{folder}/{iso_week(date).year}/weekly-{format_iso_week(date)}.md"


def persona_note_path(folder: str) -> str:
    return f"{folder}/persona.md"


class RenderService:
    """Render WHOOP data as Obsidian-flavoured markdown notes."""

    def _front_matter(self, tags: list[str], updated: str, note_type: str = "note") -> list[str]:
        lines = ["---", f"type: {note_type}", "tags:"]
        lines.extend(f"  - {tag}" for tag in tags)
        lines.append(f"updated: {updated}")
        lines.append("---")
        return lines

    def _sleep_lines(self, title: str, sleep: Sleep) -> list[str]:
        lines = [f"### {title}", ""]
        if not sleep.is_scored:
            lines.append(f"- Sleep not scored ({sleep.score_state})")
            return lines
        score = sleep.score
        stages = score.stage_summary
        lines.append(f"- Time in Bed: **{millis_to_minutes(stages.total_in_bed_time_milli)}**")
        if score.sleep_performance_percentage is not None:
            lines.append(f"- Sleep Performance: **{fmt0(score.sleep_performance_percentage)}%**")
        if score.sleep_efficiency_percentage is not None:
            lines.append(f"- Sleep Efficiency: {fmt0(score.sleep_efficiency_percentage)}%")
        if score.sleep_consistency_percentage is not None:
            lines.append(f"- Sleep Consistency: {fmt0(score.sleep_consistency_percentage)}%")
        if score.respiratory_rate is not None:
            lines.append(f"- Respiratory Rate: {fmt1(score.respiratory_rate)} rpm")
        lines.append(f"- Light: {millis_to_minutes(stages.total_light_sleep_time_milli)}")
        lines.append(f"- Deep (SWS): {millis_to_minutes(stages.total_slow_wave_sleep_time_milli)}")
        lines.append(f"- REM: {millis_to_minutes(stages.total_rem_sleep_time_milli)}")
        lines.append(f"- Awake: {millis_to_minutes(stages.total_awake_time_milli)}")
        lines.append(f"- Sleep Cycles: {stages.sleep_cycle_count}")
        lines.append(f"- Disturbances: {stages.disturbance_count}")
        return lines

    def _workout_lines(self, workout: Workout) -> list[str]:
        lines = [f"### {sport_name(workout.sport_id)}", ""]
        duration_ms = (workout.end - workout.start).total_seconds() * 1000
        lines.append(f"- Duration: {millis_to_minutes(duration_ms)}")
        if workout.score_state != "SCORED" or workout.score is None:
            lines.append(f"- Workout not scored ({workout.score_state})")
            return lines
        score = workout.score
        lines.append(
            f"- Strain: **{fmt1(score.strain)}** ({stats_service.strain_category(score.strain)})"
        )
        lines.append(f"- Avg HR: {score.average_heart_rate} bpm")
        lines.append(f"- Max HR: {score.max_heart_rate} bpm")
        lines.append(f"- Energy: {fmt0(score.kilojoule)} kJ")
        if score.distance_meter:
            lines.append(f"- Distance: {score.distance_meter / 1000:.2f} km")
        return lines

    def render_daily(self, day: DayData) -> str:
        """
        Render one day as a daily note.

        Sections with no data say so explicitly instead of printing
        empty values.

        Args:
            day: The assembled day

        Returns:
            Markdown string for the daily note
        """
        date_str = format_date(day.date)
        lines = self._front_matter(["fitness/whoop", "daily-health"], date_str)
        lines += [
            "",
            f"# WHOOP Daily — {date_str}",
            "",
            f"[[daily-{prev_day(day.date)}|← {prev_day(day.date)}]] | "
            f"[[weekly-{format_iso_week(day.date)}|{format_iso_week(day.date)}]] | "
            f"[[daily-{next_day(day.date)}|{next_day(day.date)} →]]",
            "",
            "## Recovery",
            "",
        ]

        recovery = day.recovery
        if recovery is not None and recovery.is_scored:
            score = recovery.score
            color = stats_service.recovery_color(score.recovery_score)
            lines.append(f"- Recovery Score: **{fmt0(score.recovery_score)}%** ({color})")
            lines.append(f"- HRV: **{fmt1(score.hrv_rmssd_milli)} ms**")
            lines.append(f"- Resting HR: **{fmt0(score.resting_heart_rate)} bpm**")
            if score.spo2_percentage is not None:
                lines.append(f"- SpO₂: {fmt1(score.spo2_percentage)}%")
            if score.skin_temp_celsius is not None:
                lines.append(f"- Skin Temp: {fmt1(score.skin_temp_celsius)}°C")
            if score.user_calibrating:
                lines.append("- *Calibrating*")
        elif recovery is not None:
            lines.append(f"Recovery not scored yet ({recovery.score_state}).")
        else:
            lines.append("No recovery data for this day.")

        lines += ["", "## Strain", ""]
        cycle = day.cycle
        if cycle is not None and cycle.is_scored:
            score = cycle.score
            lines.append(
                f"- Day Strain: **{fmt1(score.strain)}** ({stats_service.strain_category(score.strain)})"
            )
            lines.append(f"- Avg HR: {score.average_heart_rate} bpm")
            lines.append(f"- Max HR: {score.max_heart_rate} bpm")
            lines.append(f"- Energy: {fmt0(score.kilojoule)} kJ")
        elif cycle is not None:
            lines.append(f"Cycle not scored yet ({cycle.score_state}).")
        else:
            lines.append("No cycle/strain data for this day.")

        lines += ["", "## Sleep", ""]
        main_sleeps = non_nap_sleeps(day.sleeps)
        naps = [s for s in day.sleeps if s.nap]
        if not main_sleeps and not naps:
            lines.append("No sleep data for this day.")
        for index, sleep in main_sleeps:
            title = "Main Sleep" if index == 0 else f"Sleep {index + 1}"
            lines += self._sleep_lines(title, sleep) + [""]
        for sleep in naps:
            lines += self._sleep_lines("Nap", sleep) + [""]

        lines += ["", "## Workouts", ""]
        if not day.workouts:
            lines.append("No workouts recorded for this day.")
        for workout in day.workouts:
            lines += self._workout_lines(workout) + [""]

        return "\n".join(lines).rstrip() + "\n"

    def _day_row(self, day: DayData) -> str:
        recovery = "—"
        hrv = "—"
        if day.recovery is not None and day.recovery.is_scored:
            recovery = f"{fmt0(day.recovery.score.recovery_score)}%"
            hrv = fmt1(day.recovery.score.hrv_rmssd_milli)
        strain = fmt1(day.cycle.score.strain) if day.cycle is not None and day.cycle.is_scored else "—"
        sleep = primary_sleep(day.sleeps)
        sleep_str = millis_to_minutes(sleep.in_bed_millis) if sleep is not None and sleep.is_scored else "—"
        date_str = format_date(day.date)
        return (
            f"| [[daily-{date_str}|{date_str}]] | {recovery} | {hrv} | {strain} "
            f"| {sleep_str} | {len(day.workouts)} |"
        )

    def render_weekly(self, stats: WeekStats) -> str:
        """Render weekly statistics as a weekly note."""
        if not stats.days:
            lines = self._front_matter(["fitness/whoop", "weekly-health"], "")
            lines += ["", "# WHOOP Weekly Summary", "", "No data available for this week."]
            return "\n".join(lines) + "\n"

        start = parse_date(stats.week_start)
        week_str = format_iso_week(start)
        lines = self._front_matter(["fitness/whoop", "weekly-health"], stats.week_end)
        lines += [
            "",
            f"# WHOOP Weekly Summary — {week_str}",
            "",
            f"**Period:** {stats.week_start} → {stats.week_end}",
            "",
            f"[[weekly-{prev_week(start)}|← Prev Week ({prev_week(start)})]] | "
            f"[[weekly-{next_week(start)}|Next Week ({next_week(start)}) →]]",
            "",
            "## Overview",
            "",
            f"- Avg Recovery: **{fmt0(stats.avg_recovery)}%**",
            f"- Avg HRV: **{fmt1(stats.avg_hrv)} ms**",
            f"- Avg RHR: **{fmt0(stats.avg_rhr)} bpm**",
            f"- Avg Day Strain: **{fmt1(stats.avg_strain)}**",
            f"- Avg Sleep: **{millis_to_minutes(stats.avg_sleep_millis)}**",
            f"- Total Workouts: **{stats.total_workouts}**",
            "",
            "## Recovery Distribution",
            "",
            f"- Green (67–100%): {stats.green_days} days",
            f"- Yellow (34–66%): {stats.yellow_days} days",
            f"- Red (0–33%): {stats.red_days} days",
            "",
            "## Highlights",
            "",
            f"- Best Recovery Day: {self._highlight(stats.best_day)}",
            f"- Worst Recovery Day: {self._highlight(stats.worst_day)}",
            "",
            "## Daily Breakdown",
            "",
            "| Date | Recovery | HRV | Strain | Sleep | Workouts |",
            "| --- | --- | --- | --- | --- | --- |",
        ]
        lines.extend(self._day_row(day) for day in stats.days)

        lines += ["", "## Workouts This Week", ""]
        workouts = [(day, w) for day in stats.days for w in day.workouts]
        if not workouts:
            lines.append("No workouts recorded this week.")
        for day, workout in workouts:
            strain = fmt1(workout.score.strain) if workout.score is not None else "—"
            lines.append(f"- {format_date(day.date)}: {sport_name(workout.sport_id)} (strain {strain})")

        return "\n".join(lines) + "\n"

    def _highlight(self, day: Optional[DayData]) -> str:
        if day is None or day.recovery is None or day.recovery.score is None:
            return "—"
        date_str = format_date(day.date)
        return f"[[daily-{date_str}|{date_str}]] ({fmt0(day.recovery.score.recovery_score)}%)"

    def render_persona(self, persona: PersonaData) -> str:
        """Render the rolling persona summary as a context note."""
        lines = self._front_matter(
            ["ai-brain/context", "fitness/whoop"], persona.generated_date, note_type="context"
        )
        lines += [
            "",
            "# WHOOP Health Persona",
            "",
            "> [!info] Auto-generated",
            f"> Covers {persona.period_start} → {persona.period_end}.",
            "",
            f"## Health Persona ({persona_span_days(persona)}-Day Rolling Summary)",
            "",
            f"**Period:** {persona.period_start} → {persona.period_end}",
            "",
            "### Recovery",
            f"- Average Recovery Score: **{fmt0(persona.avg_recovery)}%**",
            f"- Average HRV: **{fmt1(persona.avg_hrv)} ms**",
            f"- HRV Trend: **{persona.hrv_trend}**",
            f"- Average RHR: **{fmt0(persona.avg_rhr)} bpm**",
            "",
            "### Sleep",
            f"- Average Sleep Duration: **{millis_to_minutes(persona.avg_sleep_millis)}**",
            f"- Average Sleep Performance: **{fmt0(persona.avg_sleep_performance)}%**",
            "",
            "### Strain",
            f"- Average Day Strain: **{fmt1(persona.avg_strain)}**",
            f"- Total Workouts: **{persona.total_workouts}**",
            "",
            "### Recovery Distribution",
            f"- Green (67–100): {persona.green_days} days",
            f"- Yellow (34–66): {persona.yellow_days} days",
            f"- Red (0–33): {persona.red_days} days",
        ]
        return "\n".join(lines) + "\n"


def persona_span_days(persona: PersonaData) -> int:
    """Number of calendar days covered by a persona, 0 when empty."""
    if not persona.period_start or not persona.period_end:
        return 0
    return (parse_date(persona.period_end) - parse_date(persona.period_start)).days + 1


# Singleton instance for use across the application
render_service = RenderService()

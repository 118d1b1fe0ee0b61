"""Weekly analytics series.

Weight-log entries are grouped into contiguous 7-day buckets anchored on
the date of the first entry. Only the policy choices for each week (phase,
workout flag, display width) are stored; every number is recomputed from
the current weight log, profile and phase coefficients on each read.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from macrotrack.config import get_settings
from macrotrack.errors import NoWeightDataError, PhaseNotFoundError, ProfileNotFoundError
from macrotrack.tracking.body_calc import WeekMetrics, compute_week_metrics
from macrotrack.tracking.models import AnalyticsWeek, DietPhase, Profile, WeightLogEntry
from macrotrack.tracking.queries import (
    AnalyticsWeekQueries,
    DietPhaseQueries,
    ProfileQueries,
    WeightQueries,
)

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


@dataclass
class WeekBucket:
    """Entries falling into one 7-day window."""

    week_number: int
    week_start: date
    entries: list[WeightLogEntry]


@dataclass
class WeeklyAnalytics:
    """A stored week joined with its phase and recomputed metrics."""

    week: AnalyticsWeek
    phase_key: Optional[str]
    metrics: WeekMetrics

    def to_dict(self) -> dict:
        """Convert to a plain dict for JSON output."""
        return {
            "week_id": self.week.week_id,
            "profile_id": self.week.profile_id,
            "week_start": self.week.week_start.isoformat(),
            "week_number": self.week.week_number,
            "workout": self.week.workout,
            "phase_id": self.week.phase_id,
            "phase_key": self.phase_key,
            "display_width": self.week.display_width,
            **self.metrics.to_dict(),
        }


def bucket_entries(entries: Sequence[WeightLogEntry]) -> list[WeekBucket]:
    """Group entries into 7-day buckets starting at the first entry's date.

    Bucket i spans [first + 7i days, first + 7(i+1) days). Buckets without
    entries are not produced.

    Args:
        entries: Weight-log entries in any order

    Returns:
        Non-empty buckets ordered by week number
    """
    if not entries:
        return []

    ordered = sorted(entries, key=lambda e: e.entry_at)
    first_date = ordered[0].entry_at.date()

    groups: dict[int, list[WeightLogEntry]] = {}
    for entry in ordered:
        index = (entry.entry_at.date() - first_date).days // DAYS_PER_WEEK
        groups.setdefault(index, []).append(entry)

    return [
        WeekBucket(
            week_number=index + 1,
            week_start=first_date + timedelta(days=index * DAYS_PER_WEEK),
            entries=groups[index],
        )
        for index in sorted(groups)
    ]


def entries_in_week(
    entries: Sequence[WeightLogEntry], week_start: date
) -> list[WeightLogEntry]:
    """Entries whose timestamp falls in [week_start, week_start + 7 days)."""
    start = datetime(week_start.year, week_start.month, week_start.day)
    end = start + timedelta(days=DAYS_PER_WEEK)
    return [e for e in entries if start <= e.entry_at < end]


def rebuild_weekly_series(
    conn: sqlite3.Connection,
    profile_id: Optional[int] = None,
    preserve_phases: Optional[bool] = None,
    default_phase_key: Optional[str] = None,
) -> list[AnalyticsWeek]:
    """Destructively recompute the stored week set from the weight log.

    All stored weeks of the profile are deleted and one week is created per
    non-empty bucket. With ``preserve_phases`` a recreated week keeps the
    phase, workout flag and display width previously stored under the same
    start date; otherwise (and for new weeks) the phase is reset to the
    default phase and the workout flag follows the profile's activity level.

    Args:
        conn: Database connection
        profile_id: Profile ID (None means the default profile)
        preserve_phases: Override for analytics.preserve_phases_on_rebuild
        default_phase_key: Override for analytics.default_phase

    Returns:
        The stored weeks, ordered by start date
    """
    settings = get_settings().analytics
    if preserve_phases is None:
        preserve_phases = settings.preserve_phases_on_rebuild
    if default_phase_key is None:
        default_phase_key = settings.default_phase

    profile, pid = _load_profile(conn, profile_id)

    previous = {w.week_start: w for w in AnalyticsWeekQueries.list_weeks(conn, pid)}
    AnalyticsWeekQueries.delete_for_profile(conn, pid)

    buckets = bucket_entries(WeightQueries.list_entries(conn, pid))
    if not buckets:
        logger.info("Rebuild for profile %s: weight log empty, no weeks", pid)
        return []

    default_phase = DietPhaseQueries.get_phase_by_key(conn, pid, default_phase_key)
    if default_phase is None or default_phase.phase_id is None:
        raise PhaseNotFoundError(f"Default diet phase '{default_phase_key}' not found")

    default_workout = profile.activity_level > 0
    preserved = 0
    weeks: list[AnalyticsWeek] = []

    for bucket in buckets:
        prior = previous.get(bucket.week_start) if preserve_phases else None
        if prior is not None:
            preserved += 1
            week = AnalyticsWeekQueries.upsert_week(
                conn,
                pid,
                bucket.week_start,
                bucket.week_number,
                prior.workout,
                prior.phase_id,
                prior.display_width,
            )
        else:
            week = AnalyticsWeekQueries.upsert_week(
                conn,
                pid,
                bucket.week_start,
                bucket.week_number,
                default_workout,
                default_phase.phase_id,
            )
        weeks.append(week)

    logger.info(
        "Rebuild for profile %s: %d weeks (%d kept prior settings)",
        pid,
        len(weeks),
        preserved,
    )
    return weeks


def list_weekly_analytics(
    conn: sqlite3.Connection,
    profile_id: Optional[int] = None,
    as_of: Optional[datetime] = None,
) -> list[WeeklyAnalytics]:
    """Read stored weeks and recompute their metrics.

    The weight log and phase table are loaded once per call and shared by
    all weeks.

    Args:
        conn: Database connection
        profile_id: Profile ID (None means the default profile)
        as_of: Moment used for age calculations (default: now)

    Returns:
        One WeeklyAnalytics per stored week, ordered by start date
    """
    profile, pid = _load_profile(conn, profile_id)

    weeks = AnalyticsWeekQueries.list_weeks(conn, pid)
    if not weeks:
        return []

    as_of = as_of or datetime.now()
    entries = WeightQueries.list_entries(conn, pid)
    phases: dict[int, DietPhase] = {
        p.phase_id: p for p in DietPhaseQueries.list_phases(conn, pid) if p.phase_id is not None
    }

    results = []
    for week in weeks:
        phase = phases.get(week.phase_id)
        metrics = compute_week_metrics(
            profile, entries_in_week(entries, week.week_start), phase, as_of=as_of
        )
        results.append(
            WeeklyAnalytics(
                week=week,
                phase_key=phase.phase_key if phase else None,
                metrics=metrics,
            )
        )
    return results


def _load_profile(conn: sqlite3.Connection, profile_id: Optional[int]) -> tuple[Profile, int]:
    """Resolve a profile together with its stored id."""
    profile = ProfileQueries.require_profile(conn, profile_id)
    if profile.profile_id is None:
        raise ProfileNotFoundError("Profile has no stored id")
    return profile, profile.profile_id


def _resolve_phase(
    conn: sqlite3.Connection,
    profile_id: int,
    phase_id: Optional[int],
    phase_key: Optional[str],
) -> Optional[DietPhase]:
    if phase_id is not None:
        phase = DietPhaseQueries.get_phase(conn, phase_id)
        if phase is None or phase.profile_id != profile_id:
            raise PhaseNotFoundError(f"Diet phase {phase_id} not found for profile {profile_id}")
        return phase
    if phase_key is not None:
        phase = DietPhaseQueries.get_phase_by_key(conn, profile_id, phase_key)
        if phase is None:
            raise PhaseNotFoundError(f"Diet phase '{phase_key}' not found for profile {profile_id}")
        return phase
    return None


def set_week_settings(
    conn: sqlite3.Connection,
    week_start: date,
    profile_id: Optional[int] = None,
    phase_id: Optional[int] = None,
    phase_key: Optional[str] = None,
    workout: Optional[bool] = None,
    display_width: Optional[int] = None,
    week_number: Optional[int] = None,
    as_of: Optional[datetime] = None,
) -> WeeklyAnalytics:
    """Upsert the policy choices of one week and return it with metrics.

    Omitted settings keep their stored value; for a week not stored yet they
    default to the configured default phase, no workout and a week number
    derived from the first weight-log entry.

    Args:
        conn: Database connection
        week_start: Start date keying the week
        profile_id: Profile ID (None means the default profile)
        phase_id: Diet phase ID (takes precedence over phase_key)
        phase_key: Diet phase key such as "cut"
        workout: Workout flag
        display_width: Preferred display width
        week_number: Explicit week number
        as_of: Moment used for age calculations (default: now)

    Raises:
        PhaseNotFoundError: If the phase is not one of the profile's phases
    """
    profile, pid = _load_profile(conn, profile_id)

    existing = AnalyticsWeekQueries.get_week(conn, pid, week_start)
    entries = WeightQueries.list_entries(conn, pid)

    phase = _resolve_phase(conn, pid, phase_id, phase_key)
    if phase is None and existing is not None:
        phase = DietPhaseQueries.get_phase(conn, existing.phase_id)
    if phase is None:
        phase = _resolve_phase(conn, pid, None, get_settings().analytics.default_phase)
    if phase is None or phase.phase_id is None:
        raise PhaseNotFoundError(f"No diet phase available for week {week_start}")

    if week_number is None:
        if existing is not None:
            week_number = existing.week_number
        elif entries:
            first_date = entries[0].entry_at.date()
            week_number = (week_start - first_date).days // DAYS_PER_WEEK + 1
        else:
            week_number = 1

    if workout is None:
        workout = existing.workout if existing is not None else False

    week = AnalyticsWeekQueries.upsert_week(
        conn, pid, week_start, week_number, workout, phase.phase_id, display_width
    )
    metrics = compute_week_metrics(
        profile, entries_in_week(entries, week_start), phase, as_of=as_of
    )
    return WeeklyAnalytics(week=week, phase_key=phase.phase_key, metrics=metrics)


def current_week(
    conn: sqlite3.Connection,
    profile_id: Optional[int] = None,
    as_of: Optional[datetime] = None,
) -> WeeklyAnalytics:
    """Return the most recent stored week with its metrics.

    Raises:
        NoWeightDataError: If the profile has no analytics weeks
    """
    weeks = list_weekly_analytics(conn, profile_id, as_of=as_of)
    if not weeks:
        raise NoWeightDataError(
            "No analytics weeks found; log weights and rebuild analytics first"
        )
    return max(weeks, key=lambda w: w.week.week_start)

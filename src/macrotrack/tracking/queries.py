"""Database queries for profiles, weight log, diet phases and analytics weeks."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, timedelta
from typing import Optional

from macrotrack.errors import PhaseNotFoundError, ProfileNotFoundError
from macrotrack.tracking.models import (
    AnalyticsWeek,
    DietPhase,
    Profile,
    WeightLogEntry,
)
from macrotrack.tracking.phases import DEFAULT_DIET_PHASES, missing_phase_keys

logger = logging.getLogger(__name__)


def _row_to_profile(row: sqlite3.Row) -> Profile:
    return Profile(
        profile_id=row["profile_id"],
        height_cm=row["height_cm"],
        date_of_birth=date.fromisoformat(row["date_of_birth"]),
        sex=row["sex"],
        activity_level=row["activity_level"],
        role=row["role"],
        created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
    )


def _row_to_entry(row: sqlite3.Row) -> WeightLogEntry:
    return WeightLogEntry(
        entry_id=row["entry_id"],
        profile_id=row["profile_id"],
        entry_at=datetime.fromisoformat(row["entry_at"]),
        weight_kg=row["weight_kg"],
        body_fat_pct=row["body_fat_pct"],
    )


def _row_to_phase(row: sqlite3.Row) -> DietPhase:
    return DietPhase(
        phase_id=row["phase_id"],
        profile_id=row["profile_id"],
        phase_key=row["phase_key"],
        protein_per_kg_lean=row["protein_per_kg_lean"],
        fat_per_kg_body=row["fat_per_kg_body"],
        calorie_offset=row["calorie_offset"],
    )


def _row_to_week(row: sqlite3.Row) -> AnalyticsWeek:
    return AnalyticsWeek(
        week_id=row["week_id"],
        profile_id=row["profile_id"],
        week_start=date.fromisoformat(row["week_start"]),
        week_number=row["week_number"],
        workout=bool(row["workout"]),
        phase_id=row["phase_id"],
        display_width=row["display_width"],
    )


class ProfileQueries:
    """Database queries for profiles."""

    @staticmethod
    def create_profile(conn: sqlite3.Connection, profile: Profile) -> int:
        """Create a new profile and return the profile_id."""
        cursor = conn.execute(
            """
            INSERT INTO profiles (height_cm, date_of_birth, sex, activity_level, role)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                profile.height_cm,
                profile.date_of_birth.isoformat(),
                profile.sex,
                profile.activity_level,
                profile.role,
            ),
        )
        return cursor.lastrowid or 0

    @staticmethod
    def get_profile(conn: sqlite3.Connection, profile_id: int) -> Optional[Profile]:
        """Get profile by ID."""
        row = conn.execute(
            "SELECT * FROM profiles WHERE profile_id = ?", (profile_id,)
        ).fetchone()
        return _row_to_profile(row) if row else None

    @staticmethod
    def get_default_profile(conn: sqlite3.Connection) -> Optional[Profile]:
        """Get the first (default) profile."""
        row = conn.execute(
            "SELECT * FROM profiles ORDER BY profile_id LIMIT 1"
        ).fetchone()
        return _row_to_profile(row) if row else None

    @staticmethod
    def require_profile(conn: sqlite3.Connection, profile_id: Optional[int]) -> Profile:
        """Resolve a profile id (None means the default profile) or raise."""
        if profile_id is None:
            profile = ProfileQueries.get_default_profile(conn)
        else:
            profile = ProfileQueries.get_profile(conn, profile_id)
        if profile is None:
            raise ProfileNotFoundError(
                "No profile found" if profile_id is None else f"Profile {profile_id} not found"
            )
        return profile

    @staticmethod
    def update_profile(conn: sqlite3.Connection, profile: Profile) -> None:
        """Update an existing profile."""
        if profile.profile_id is None:
            raise ValueError("Cannot update profile without profile_id")

        conn.execute(
            """
            UPDATE profiles
            SET height_cm = ?, date_of_birth = ?, sex = ?, activity_level = ?, role = ?
            WHERE profile_id = ?
            """,
            (
                profile.height_cm,
                profile.date_of_birth.isoformat(),
                profile.sex,
                profile.activity_level,
                profile.role,
                profile.profile_id,
            ),
        )


class WeightQueries:
    """Database queries for weight log entries."""

    @staticmethod
    def add_entry(
        conn: sqlite3.Connection,
        profile_id: int,
        entry_at: datetime,
        weight_kg: float,
        body_fat_pct: Optional[float] = None,
    ) -> WeightLogEntry:
        """Add a weight entry."""
        entry = WeightLogEntry(
            entry_id=None,
            profile_id=profile_id,
            entry_at=entry_at,
            weight_kg=weight_kg,
            body_fat_pct=body_fat_pct,
        )
        cursor = conn.execute(
            """
            INSERT INTO weight_log (profile_id, entry_at, weight_kg, body_fat_pct)
            VALUES (?, ?, ?, ?)
            """,
            (profile_id, entry_at.isoformat(), weight_kg, body_fat_pct),
        )
        entry.entry_id = cursor.lastrowid
        return entry

    @staticmethod
    def get_entry(conn: sqlite3.Connection, entry_id: int) -> Optional[WeightLogEntry]:
        """Get a single entry by ID."""
        row = conn.execute(
            "SELECT * FROM weight_log WHERE entry_id = ?", (entry_id,)
        ).fetchone()
        return _row_to_entry(row) if row else None

    @staticmethod
    def update_entry(
        conn: sqlite3.Connection,
        entry_id: int,
        weight_kg: float,
        body_fat_pct: Optional[float] = None,
    ) -> Optional[WeightLogEntry]:
        """Replace weight and body fat of an entry. Returns None if missing."""
        existing = WeightQueries.get_entry(conn, entry_id)
        if existing is None:
            return None

        updated = WeightLogEntry(
            entry_id=existing.entry_id,
            profile_id=existing.profile_id,
            entry_at=existing.entry_at,
            weight_kg=weight_kg,
            body_fat_pct=body_fat_pct,
        )
        conn.execute(
            "UPDATE weight_log SET weight_kg = ?, body_fat_pct = ? WHERE entry_id = ?",
            (weight_kg, body_fat_pct, entry_id),
        )
        return updated

    @staticmethod
    def delete_entry(conn: sqlite3.Connection, entry_id: int) -> bool:
        """Delete one entry. Returns True if a row was removed."""
        cursor = conn.execute("DELETE FROM weight_log WHERE entry_id = ?", (entry_id,))
        return cursor.rowcount > 0

    @staticmethod
    def clear_entries(conn: sqlite3.Connection, profile_id: int) -> tuple[int, int]:
        """Delete every entry of a profile along with its analytics weeks.

        Returns:
            Tuple of (deleted entries, deleted analytics weeks)
        """
        deleted_logs = conn.execute(
            "DELETE FROM weight_log WHERE profile_id = ?", (profile_id,)
        ).rowcount
        deleted_weeks = AnalyticsWeekQueries.delete_for_profile(conn, profile_id)
        return deleted_logs, deleted_weeks

    @staticmethod
    def list_entries(
        conn: sqlite3.Connection,
        profile_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[WeightLogEntry]:
        """List entries in chronological order.

        Args:
            profile_id: Profile ID
            start: If set, entries at or after this moment
            end: If set, entries strictly before this moment
        """
        query = "SELECT * FROM weight_log WHERE profile_id = ?"
        params: list = [profile_id]

        if start is not None:
            query += " AND entry_at >= ?"
            params.append(start.isoformat())
        if end is not None:
            query += " AND entry_at < ?"
            params.append(end.isoformat())

        query += " ORDER BY entry_at ASC, entry_id ASC"

        return [_row_to_entry(row) for row in conn.execute(query, params).fetchall()]

    @staticmethod
    def list_recent(
        conn: sqlite3.Connection,
        profile_id: int,
        days: int,
        today: Optional[date] = None,
    ) -> list[WeightLogEntry]:
        """Entries from the last `days` calendar days, today included."""
        today = today or date.today()
        since = today - timedelta(days=days - 1)
        return WeightQueries.list_entries(
            conn, profile_id, start=datetime(since.year, since.month, since.day)
        )


class DietPhaseQueries:
    """Database queries for diet phases."""

    @staticmethod
    def ensure_defaults(conn: sqlite3.Connection, profile_id: int) -> int:
        """Seed any default phase missing for the profile.

        Returns:
            Number of rows created
        """
        existing = {
            row[0]
            for row in conn.execute(
                "SELECT phase_key FROM diet_phases WHERE profile_id = ?", (profile_id,)
            ).fetchall()
        }
        missing = missing_phase_keys(existing)
        for key in missing:
            cfg = DEFAULT_DIET_PHASES[key]
            conn.execute(
                """
                INSERT INTO diet_phases
                (profile_id, phase_key, protein_per_kg_lean, fat_per_kg_body, calorie_offset)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    profile_id,
                    key,
                    cfg.protein_per_kg_lean,
                    cfg.fat_per_kg_body,
                    cfg.calorie_offset,
                ),
            )
        if missing:
            logger.info("Seeded diet phases %s for profile %s", missing, profile_id)
        return len(missing)

    @staticmethod
    def list_phases(conn: sqlite3.Connection, profile_id: int) -> list[DietPhase]:
        """List a profile's phases ordered by key, seeding defaults first."""
        DietPhaseQueries.ensure_defaults(conn, profile_id)
        rows = conn.execute(
            "SELECT * FROM diet_phases WHERE profile_id = ? ORDER BY phase_key",
            (profile_id,),
        ).fetchall()
        return [_row_to_phase(row) for row in rows]

    @staticmethod
    def get_phase(conn: sqlite3.Connection, phase_id: int) -> Optional[DietPhase]:
        """Get a phase by ID."""
        row = conn.execute(
            "SELECT * FROM diet_phases WHERE phase_id = ?", (phase_id,)
        ).fetchone()
        return _row_to_phase(row) if row else None

    @staticmethod
    def get_phase_by_key(
        conn: sqlite3.Connection, profile_id: int, phase_key: str
    ) -> Optional[DietPhase]:
        """Get a profile's phase by key, seeding defaults first."""
        DietPhaseQueries.ensure_defaults(conn, profile_id)
        row = conn.execute(
            """
            SELECT * FROM diet_phases
            WHERE profile_id = ? AND phase_key = ?
            ORDER BY phase_id LIMIT 1
            """,
            (profile_id, phase_key),
        ).fetchone()
        return _row_to_phase(row) if row else None

    @staticmethod
    def update_phase(
        conn: sqlite3.Connection,
        profile_id: int,
        phase_id: int,
        protein_per_kg_lean: Optional[float] = None,
        fat_per_kg_body: Optional[float] = None,
        calorie_offset: Optional[float] = None,
    ) -> DietPhase:
        """Edit coefficients of one phase.

        Protein and fat coefficients are only accepted when positive. The
        calorie offset is rounded to whole kcal.

        Raises:
            PhaseNotFoundError: If the phase does not belong to the profile
        """
        phase = DietPhaseQueries.get_phase(conn, phase_id)
        if phase is None or phase.profile_id != profile_id:
            raise PhaseNotFoundError(f"Diet phase {phase_id} not found for profile {profile_id}")

        if protein_per_kg_lean is not None and protein_per_kg_lean > 0:
            phase.protein_per_kg_lean = float(protein_per_kg_lean)
        if fat_per_kg_body is not None and fat_per_kg_body > 0:
            phase.fat_per_kg_body = float(fat_per_kg_body)
        if calorie_offset is not None:
            phase.calorie_offset = int(round(calorie_offset))

        conn.execute(
            """
            UPDATE diet_phases
            SET protein_per_kg_lean = ?, fat_per_kg_body = ?, calorie_offset = ?
            WHERE phase_id = ?
            """,
            (
                phase.protein_per_kg_lean,
                phase.fat_per_kg_body,
                phase.calorie_offset,
                phase_id,
            ),
        )
        return phase


class AnalyticsWeekQueries:
    """Database queries for stored analytics weeks."""

    @staticmethod
    def list_weeks(conn: sqlite3.Connection, profile_id: int) -> list[AnalyticsWeek]:
        """List a profile's weeks ordered by start date."""
        rows = conn.execute(
            "SELECT * FROM analytics_weeks WHERE profile_id = ? ORDER BY week_start",
            (profile_id,),
        ).fetchall()
        return [_row_to_week(row) for row in rows]

    @staticmethod
    def get_week(
        conn: sqlite3.Connection, profile_id: int, week_start: date
    ) -> Optional[AnalyticsWeek]:
        """Get the week starting on a date."""
        row = conn.execute(
            "SELECT * FROM analytics_weeks WHERE profile_id = ? AND week_start = ?",
            (profile_id, week_start.isoformat()),
        ).fetchone()
        return _row_to_week(row) if row else None

    @staticmethod
    def upsert_week(
        conn: sqlite3.Connection,
        profile_id: int,
        week_start: date,
        week_number: int,
        workout: bool,
        phase_id: int,
        display_width: Optional[int] = None,
    ) -> AnalyticsWeek:
        """Insert or update the week keyed by (profile, week_start).

        An omitted display width keeps the stored one.
        """
        conn.execute(
            """
            INSERT INTO analytics_weeks
            (profile_id, week_start, week_number, workout, phase_id, display_width)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(profile_id, week_start) DO UPDATE SET
                week_number = excluded.week_number,
                workout = excluded.workout,
                phase_id = excluded.phase_id,
                display_width = COALESCE(excluded.display_width, analytics_weeks.display_width)
            """,
            (
                profile_id,
                week_start.isoformat(),
                week_number,
                bool(workout),
                phase_id,
                display_width,
            ),
        )
        week = AnalyticsWeekQueries.get_week(conn, profile_id, week_start)
        if week is None:
            raise sqlite3.DatabaseError(
                f"Analytics week {week_start} for profile {profile_id} was not stored"
            )
        return week

    @staticmethod
    def delete_for_profile(conn: sqlite3.Connection, profile_id: int) -> int:
        """Delete every week of a profile. Returns the number removed."""
        return conn.execute(
            "DELETE FROM analytics_weeks WHERE profile_id = ?", (profile_id,)
        ).rowcount

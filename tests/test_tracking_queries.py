"""Tests for profile, weight-log and diet-phase persistence."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from macrotrack.errors import PhaseNotFoundError, ProfileNotFoundError
from macrotrack.tracking.models import Profile, WeightLogEntry
from macrotrack.tracking.phases import DEFAULT_DIET_PHASES, missing_phase_keys
from macrotrack.tracking.queries import DietPhaseQueries, ProfileQueries, WeightQueries


class TestModels:
    """Tests for record validation."""

    def test_invalid_sex(self):
        with pytest.raises(ValueError, match="sex"):
            Profile(None, 180, date(1990, 1, 1), "male", 1)

    def test_non_positive_weight(self):
        with pytest.raises(ValueError, match="weight"):
            WeightLogEntry(None, 1, datetime(2025, 1, 1), 0)

    def test_body_fat_out_of_range(self):
        with pytest.raises(ValueError, match="body fat"):
            WeightLogEntry(None, 1, datetime(2025, 1, 1), 80, 100)

    def test_offset_aware_time_rejected(self):
        at = datetime(2025, 1, 1, 8, tzinfo=timezone(timedelta(hours=2)))
        with pytest.raises(ValueError, match="UTC offset"):
            WeightLogEntry(None, 1, at, 80)

    def test_entry_lean_mass(self):
        assert WeightLogEntry(None, 1, datetime(2025, 1, 1), 80, 25).lean_mass_kg == pytest.approx(60)
        assert WeightLogEntry(None, 1, datetime(2025, 1, 1), 80).lean_mass_kg is None


class TestProfiles:
    """Tests for profile lookup."""

    def test_require_default_profile(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, None)
        assert profile.profile_id == stored_profile
        assert profile.date_of_birth == date(1990, 1, 1)

    def test_require_missing_profile(self, temp_db):
        with temp_db.get_connection() as conn:
            with pytest.raises(ProfileNotFoundError) as exc:
                ProfileQueries.require_profile(conn, None)
        assert exc.value.label == "profile_not_found"

    def test_update_profile(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            profile = ProfileQueries.get_profile(conn, stored_profile)
            profile.activity_level = 3
            ProfileQueries.update_profile(conn, profile)
            assert ProfileQueries.get_profile(conn, stored_profile).activity_level == 3


class TestWeightLog:
    """Tests for weight-log maintenance."""

    def test_entries_listed_chronologically(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            WeightQueries.add_entry(conn, stored_profile, datetime(2025, 1, 3, 8), 80.2)
            WeightQueries.add_entry(conn, stored_profile, datetime(2025, 1, 1, 8), 80.9, 21.0)
            entries = WeightQueries.list_entries(conn, stored_profile)
        assert [e.entry_at.day for e in entries] == [1, 3]
        assert entries[0].body_fat_pct == 21.0
        assert entries[1].body_fat_pct is None

    def test_list_window_end_exclusive(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            WeightQueries.add_entry(conn, stored_profile, datetime(2025, 1, 1, 8), 80)
            WeightQueries.add_entry(conn, stored_profile, datetime(2025, 1, 8, 0), 80)
            entries = WeightQueries.list_entries(
                conn, stored_profile, start=datetime(2025, 1, 1), end=datetime(2025, 1, 8)
            )
        assert len(entries) == 1

    def test_list_recent(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            WeightQueries.add_entry(conn, stored_profile, datetime(2025, 1, 1, 8), 80)
            WeightQueries.add_entry(conn, stored_profile, datetime(2025, 1, 5, 8), 79)
            entries = WeightQueries.list_recent(conn, stored_profile, 3, today=date(2025, 1, 6))
        assert [e.weight_kg for e in entries] == [79]

    def test_aware_entry_not_stored(self, temp_db, stored_profile):
        at = datetime(2025, 1, 1, 8, tzinfo=timezone.utc)
        with temp_db.get_connection() as conn:
            with pytest.raises(ValueError):
                WeightQueries.add_entry(conn, stored_profile, at, 80)
            assert WeightQueries.list_entries(conn, stored_profile) == []

    def test_update_and_delete(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            entry = WeightQueries.add_entry(conn, stored_profile, datetime(2025, 1, 1, 8), 80)
            updated = WeightQueries.update_entry(conn, entry.entry_id, 81, 19.5)
            assert updated.weight_kg == 81
            assert WeightQueries.get_entry(conn, entry.entry_id).body_fat_pct == 19.5
            assert WeightQueries.delete_entry(conn, entry.entry_id)
            assert not WeightQueries.delete_entry(conn, entry.entry_id)
            assert WeightQueries.update_entry(conn, entry.entry_id, 80) is None


class TestDietPhases:
    """Tests for seed-if-absent phases and coefficient edits."""

    def test_missing_phase_keys(self):
        assert missing_phase_keys({"cut", "rest"}) == ["bulk", "refeed"]
        assert missing_phase_keys(set(DEFAULT_DIET_PHASES)) == []

    def test_seeding_is_idempotent(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            assert DietPhaseQueries.ensure_defaults(conn, stored_profile) == 0
            phases = DietPhaseQueries.list_phases(conn, stored_profile)
        assert sorted(p.phase_key for p in phases) == ["bulk", "cut", "refeed", "rest"]

    def test_reseeds_only_missing_key(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            conn.execute(
                "DELETE FROM diet_phases WHERE profile_id = ? AND phase_key = 'bulk'",
                (stored_profile,),
            )
            assert DietPhaseQueries.ensure_defaults(conn, stored_profile) == 1
            bulk = DietPhaseQueries.get_phase_by_key(conn, stored_profile, "bulk")
        assert bulk.calorie_offset == 500
        assert bulk.protein_per_kg_lean == 1.8

    def test_default_coefficients(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            cut = DietPhaseQueries.get_phase_by_key(conn, stored_profile, "cut")
        assert (cut.protein_per_kg_lean, cut.fat_per_kg_body, cut.calorie_offset) == (2.1, 0.25, -1500)

    def test_update_phase_rules(self, temp_db, stored_profile):
        """Non-positive coefficients are ignored; the offset is rounded."""
        with temp_db.get_connection() as conn:
            cut = DietPhaseQueries.get_phase_by_key(conn, stored_profile, "cut")
            DietPhaseQueries.update_phase(
                conn, stored_profile, cut.phase_id,
                protein_per_kg_lean=0, fat_per_kg_body=0.35, calorie_offset=-1249.6,
            )
            stored = DietPhaseQueries.get_phase(conn, cut.phase_id)
        assert stored.protein_per_kg_lean == 2.1
        assert stored.fat_per_kg_body == 0.35
        assert stored.calorie_offset == -1250

    def test_update_unknown_phase(self, temp_db, stored_profile):
        with temp_db.get_connection() as conn:
            with pytest.raises(PhaseNotFoundError):
                DietPhaseQueries.update_phase(conn, stored_profile, 9999, calorie_offset=0)

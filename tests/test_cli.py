"""Tests for CLI commands."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from macrotrack.cli import app

runner = CliRunner()

FOODS_CSV = (
    "name,protein,carbs,fat,calories,category,meal_type\n"
    "Chicken breast,31,0,3.6,165,Meat,lunch\n"
    "Egg white,11,0.7,0.2,52,Eggs,breakfast\n"
    "Whole wheat bread,13,41,3.4,247,Bakery,breakfast\n"
    "Penne pasta,13,75,1.5,371,Pasta,lunch\n"
    "Broccoli,2.8,7,0.4,34,Vegetables,\n"
    "Olive oil,0,0,100,884,Oils,\n"
    "Greek yogurt,10,3.6,0.4,59,Dairy,snack\n"
    "Banana,1.1,23,0.3,89,Fruit,snack\n"
    "Cod fillet,18,0,0.7,82,Fish,dinner\n"
    "Brown rice,2.7,26,1,123,Grains,dinner\n"
    "Red wine,0.1,2.6,0,85,Wine,\n"
)


def _json(result) -> dict:
    return json.loads(result.stdout)


def _invoke(*args: str):
    return runner.invoke(app, list(args))


@pytest.fixture
def profile_cli(global_db):
    """Database with a profile created through the CLI."""
    result = _invoke(
        "profile", "set", "--height", "180", "--dob", "1990-01-01",
        "--sex", "male", "--activity", "1", "--json",
    )
    assert result.exit_code == 0, result.output
    return global_db


@pytest.fixture
def tracked_cli(profile_cli):
    """Profile with two weeks of weight data and rebuilt analytics."""
    for day, weight in (("2025-01-01", "80"), ("2025-01-03", "79.6"), ("2025-01-09", "79.2")):
        result = _invoke("weight", "add", weight, "--body-fat", "20", "--date", day, "--time", "08:00")
        assert result.exit_code == 0, result.output
    assert _invoke("analytics", "rebuild").exit_code == 0
    return profile_cli


class TestMainCommands:
    """Tests for main CLI commands."""

    def test_help(self):
        result = _invoke("--help")
        assert result.exit_code == 0
        assert "meal plan" in result.output.lower()

    @pytest.mark.parametrize(
        "group", ["profile", "weight", "phases", "analytics", "foods", "categories", "plan"]
    )
    def test_group_help(self, group):
        assert _invoke(group, "--help").exit_code == 0

    def test_init(self, global_db):
        result = _invoke("init", "--json")
        assert result.exit_code == 0
        data = _json(result)
        assert data["success"] is True
        assert data["command"] == "init"


class TestProfileCommands:
    """Tests for profile subcommands."""

    def test_created_with_phases(self, profile_cli):
        data = _json(_invoke("profile", "show", "--json"))
        assert data["data"]["sex"] == "Male"
        assert data["data"]["activity_level"] == 1

        phases = _json(_invoke("phases", "list", "--json"))["data"]["phases"]
        assert sorted(p["key"] for p in phases) == ["bulk", "cut", "refeed", "rest"]

    def test_new_profile_needs_required_fields(self, global_db):
        result = _invoke("profile", "set", "--height", "180", "--json")
        assert result.exit_code == 1
        assert _json(result)["success"] is False

    def test_update_keeps_other_fields(self, profile_cli):
        assert _invoke("profile", "set", "--activity", "3").exit_code == 0
        data = _json(_invoke("profile", "show", "--json"))["data"]
        assert data["activity_level"] == 3
        assert data["height_cm"] == 180

    def test_show_without_profile(self, global_db):
        result = _invoke("profile", "show", "--json")
        assert result.exit_code == 1
        data = _json(result)
        assert data["error_label"] == "profile_not_found"
        assert data["suggestions"]


class TestWeightCommands:
    """Tests for weight subcommands."""

    def test_add_reports_lean_mass(self, profile_cli):
        result = _invoke("weight", "add", "80", "-b", "25", "--date", "2025-01-01", "--json")
        data = _json(result)["data"]
        assert data["lean_mass_kg"] == 60.0
        assert data["entry_at"].startswith("2025-01-01")

    def test_rejects_non_positive_weight(self, profile_cli):
        result = _invoke("weight", "add", "0", "--json")
        assert result.exit_code == 1

    def test_rejects_time_with_utc_offset(self, tracked_cli):
        """An offset-aware time is refused, so weekly reads keep working."""
        result = _invoke(
            "weight", "add", "80", "--date", "2025-01-02", "--time", "08:00+02:00", "--json"
        )
        assert result.exit_code == 1
        assert "UTC offset" in _json(result)["errors"][0]

        entries = _json(_invoke("weight", "list", "--json"))["data"]["entries"]
        assert len(entries) == 3
        assert _invoke("analytics", "rebuild").exit_code == 0
        assert _invoke("analytics", "show", "--json").exit_code == 0

    def test_list_update_delete(self, tracked_cli):
        entries = _json(_invoke("weight", "list", "--json"))["data"]["entries"]
        assert [e["weight_kg"] for e in entries] == [80, 79.6, 79.2]

        first = entries[0]["entry_id"]
        assert _invoke("weight", "update", str(first), "81", "-b", "21").exit_code == 0
        assert _invoke("weight", "delete", str(first)).exit_code == 0
        assert _invoke("weight", "delete", str(first)).exit_code == 1

    def test_clear_requires_confirmation(self, tracked_cli):
        assert _invoke("weight", "clear").exit_code == 1
        result = _invoke("weight", "clear", "--yes", "--json")
        assert _json(result)["data"] == {"deleted_entries": 3, "deleted_weeks": 2}

    def test_stats(self, tracked_cli):
        data = _json(_invoke("weight", "stats", "--json"))["data"]
        assert data["entry_count"] == 3
        assert data["average_weight"] == pytest.approx(79.6)
        assert data["average_body_fat"] == pytest.approx(20.0)


class TestAnalyticsCommands:
    """Tests for analytics subcommands."""

    def test_rebuild_and_show(self, tracked_cli):
        weeks = _json(_invoke("analytics", "show", "--json"))["data"]["weeks"]
        assert [w["week_number"] for w in weeks] == [1, 2]
        assert weeks[0]["week_start"] == "2025-01-01"
        assert weeks[0]["phase_key"] == "cut"
        assert weeks[0]["avg_weight"] == pytest.approx(79.8)
        assert weeks[0]["target_kcal"] is not None

    def test_set_phase_survives_rebuild(self, tracked_cli):
        result = _invoke("analytics", "set", "2025-01-08", "--phase", "bulk", "--json")
        assert result.exit_code == 0, result.output
        assert _invoke("analytics", "rebuild").exit_code == 0
        weeks = _json(_invoke("analytics", "show", "--json"))["data"]["weeks"]
        assert weeks[1]["phase_key"] == "bulk"

        assert _invoke("analytics", "rebuild", "--reset-phases").exit_code == 0
        weeks = _json(_invoke("analytics", "show", "--json"))["data"]["weeks"]
        assert weeks[1]["phase_key"] == "cut"

    def test_set_unknown_phase(self, tracked_cli):
        result = _invoke("analytics", "set", "2025-01-01", "--phase", "maintenance", "--json")
        assert result.exit_code == 1
        assert _json(result)["error_label"] == "phase_not_found"

    def test_phase_edit_changes_targets(self, tracked_cli):
        before = _json(_invoke("analytics", "show", "--json"))["data"]["weeks"][0]
        assert _invoke("phases", "set", "cut", "--offset", "-1000").exit_code == 0
        after = _json(_invoke("analytics", "show", "--json"))["data"]["weeks"][0]
        assert after["target_kcal"] - before["target_kcal"] == pytest.approx(500)


class TestFoodCommands:
    """Tests for foods and categories subcommands."""

    def test_import_and_list(self, global_db, tmp_path):
        csv_path = tmp_path / "foods.csv"
        csv_path.write_text(FOODS_CSV)
        result = _invoke("foods", "import", str(csv_path), "--json")
        assert _json(result)["data"]["loaded"] == 11

        foods = _json(_invoke("foods", "list", "--meal-type", "dinner", "--json"))["data"]["foods"]
        assert [f["name"] for f in foods] == ["Brown rice", "Cod fillet"]

        categories = _json(_invoke("categories", "list", "--json"))["data"]["categories"]
        assert len(categories) == 11

    def test_import_missing_file(self, global_db, tmp_path):
        result = _invoke("foods", "import", str(tmp_path / "nope.csv"))
        assert result.exit_code == 1

    def test_export_matches_import_format(self, global_db, tmp_path):
        csv_path = tmp_path / "foods.csv"
        csv_path.write_text(FOODS_CSV)
        _invoke("foods", "import", str(csv_path))

        out_path = tmp_path / "export.csv"
        result = _invoke("foods", "export", str(out_path), "--json")
        assert result.exit_code == 0, result.output
        assert _json(result)["data"]["foods"] == 11

        lines = out_path.read_text().strip().splitlines()
        assert lines[0] == "name,protein,carbs,fat,calories,category,meal_type"
        assert len(lines) == 12
        assert lines[1].startswith("Banana,")

    def test_add_rejects_unknown_meal_type(self, global_db):
        result = _invoke(
            "foods", "add", "Pizza", "--protein", "11", "--carbs", "33",
            "--fat", "10", "--calories", "266", "--meal-type", "brunch", "--json",
        )
        assert result.exit_code == 1

    def test_add_and_delete(self, global_db):
        result = _invoke(
            "foods", "add", "Oats", "--protein", "17", "--carbs", "66",
            "--fat", "7", "--calories", "389", "-c", "Grains", "--json",
        )
        food_id = _json(result)["data"]["food_id"]
        assert _invoke("foods", "delete", str(food_id)).exit_code == 0
        assert _invoke("foods", "delete", str(food_id)).exit_code == 1


class TestPlanCommands:
    """Tests for plan generation."""

    def test_requires_weekly_targets(self, profile_cli):
        result = _invoke("plan", "generate", "--json")
        assert result.exit_code == 1
        assert _json(result)["error_label"] == "no_weight_data"

    def test_requires_foods(self, tracked_cli):
        result = _invoke("plan", "generate", "--json")
        assert result.exit_code == 1
        assert _json(result)["error_label"] == "no_usable_foods"

    def test_generate_and_save(self, tracked_cli, tmp_path):
        csv_path = tmp_path / "foods.csv"
        csv_path.write_text(FOODS_CSV)
        assert _invoke("foods", "import", str(csv_path)).exit_code == 0

        result = _invoke("plan", "generate", "--seed", "7", "--attempts", "25", "--save", "--json")
        assert result.exit_code == 0, result.output
        data = _json(result)["data"]
        assert len(data["items"]) == 18
        assert data["saved_items"] == 18
        assert data["week_start"] == "2025-01-08"
        assert data["attempts_used"] <= 25
        assert all(item["food"] != "Red wine" for item in data["items"])
        assert all(30 <= item["grams"] <= 400 for item in data["items"])

        saved = _json(_invoke("plan", "list", "--json"))["data"]
        assert len(saved["items"]) == 18
        assert sorted(i["grams"] for i in saved["items"]) == sorted(i["grams"] for i in data["items"])
        by_date = _json(_invoke("plan", "list", "--date", saved["plan_date"], "--json"))["data"]
        assert by_date["items"] == saved["items"]

    def test_list_without_saved_plans(self, profile_cli):
        result = _invoke("plan", "list", "--json")
        assert result.exit_code == 0
        assert _json(result)["data"] == {"plan_date": None, "items": []}

    def test_seed_is_reproducible(self, tracked_cli, tmp_path):
        csv_path = tmp_path / "foods.csv"
        csv_path.write_text(FOODS_CSV)
        _invoke("foods", "import", str(csv_path))

        first = _json(_invoke("plan", "generate", "--seed", "3", "--attempts", "10", "--json"))
        second = _json(_invoke("plan", "generate", "--seed", "3", "--attempts", "10", "--json"))
        assert first["data"]["items"] == second["data"]["items"]

    def test_markdown_output(self, tracked_cli, tmp_path):
        csv_path = tmp_path / "foods.csv"
        csv_path.write_text(FOODS_CSV)
        _invoke("foods", "import", str(csv_path))

        result = _invoke("plan", "generate", "--seed", "1", "--attempts", "5", "--format", "markdown")
        assert result.exit_code == 0
        assert "## Breakfast" in result.stdout

"""Tests for meal-plan output formatting."""

from __future__ import annotations

import json
from io import StringIO

import pytest
from rich.console import Console

from macrotrack.planner.formatters import (
    MarkdownFormatter,
    format_delta_percent,
    format_result,
    plan_to_dict,
)
from macrotrack.planner.generator import relative_errors
from macrotrack.planner.models import (
    Food,
    MacroRole,
    MacroTargets,
    MealPlanResult,
    PlanItem,
    PlanTotals,
)


@pytest.fixture
def small_result() -> MealPlanResult:
    """Two-slot plan with hand-picked portions."""
    chicken = Food(1, "Chicken breast", 31, 0, 3.6, 165)
    rice = Food(2, "Brown rice", 2.7, 26, 1, 123)
    oil = Food(3, "Olive oil", 0, 0, 100, 884)
    items = [
        PlanItem.from_portion("Lunch", MacroRole.PROTEIN, chicken, 200),
        PlanItem.from_portion("Lunch", MacroRole.CARBS, rice, 250),
        PlanItem.from_portion("Lunch", MacroRole.FAT, oil, 30),
        PlanItem.from_portion("Dinner", MacroRole.PROTEIN, chicken, 150),
    ]
    targets = MacroTargets(kcal=1200, protein=110, carbs=70, fat=40)
    totals = PlanTotals.of(items)
    errors = relative_errors(totals, targets)
    return MealPlanResult(
        items=items,
        totals=totals,
        targets=targets,
        errors=errors,
        score=max(abs(e) for e in errors.values()),
        attempts_used=12,
        within_tolerance=False,
        seed=42,
        slot_names=["Breakfast", "Lunch", "Dinner"],
    )


class TestDeltaPercent:
    """Tests for signed percentage rendering."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (0.032, "+3.2%"),
            (-0.01, "-1.0%"),
            (0.0, "0.0%"),
            (-0.0004, "0.0%"),
            (0.00049, "0.0%"),
            (1.5, "+150.0%"),
        ],
    )
    def test_format(self, error, expected):
        assert format_delta_percent(error) == expected


class TestPlanToDict:
    """Tests for the JSON-ready plan view."""

    def test_keys(self, small_result):
        data = plan_to_dict(small_result)
        assert set(data) == {
            "items", "totals", "targets", "errors", "deltas",
            "score", "attempts_used", "within_tolerance", "seed",
        }
        assert data["seed"] == 42
        assert data["targets"]["calories"] == 1200

    def test_items(self, small_result):
        first = plan_to_dict(small_result)["items"][0]
        assert first["slot"] == "Lunch"
        assert first["role"] == "protein"
        assert first["grams"] == 200
        assert first["calories"] == pytest.approx(330.0)
        assert first["protein"] == pytest.approx(62.0)

    def test_deltas_match_errors(self, small_result):
        data = plan_to_dict(small_result)
        for dim, err in small_result.errors.items():
            assert data["deltas"][dim] == format_delta_percent(err)

    def test_json_serializable(self, small_result):
        parsed = json.loads(format_result(small_result, "json"))
        assert len(parsed["items"]) == 4


class TestMarkdown:
    """Tests for the Markdown rendering."""

    def test_slot_headers_skip_empty_slots(self, small_result):
        md = MarkdownFormatter().format(small_result)
        assert "## Lunch" in md
        assert "## Dinner" in md
        assert "## Breakfast" not in md
        assert md.index("## Lunch") < md.index("## Dinner")

    def test_totals_section(self, small_result):
        md = format_result(small_result, "markdown")
        assert "## Totals" in md
        assert "| Chicken breast | 200g |" in md


class TestFormatResult:
    """Tests for format dispatch."""

    def test_table_prints(self, small_result):
        buffer = StringIO()
        console = Console(file=buffer, width=120)
        assert format_result(small_result, "table", console) is None
        output = buffer.getvalue()
        assert "BEST EFFORT" in output
        assert "Chicken breast" in output

    def test_unknown_format(self, small_result):
        with pytest.raises(ValueError, match="Unknown output format"):
            format_result(small_result, "csv")

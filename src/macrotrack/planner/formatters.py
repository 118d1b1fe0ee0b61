"""Output formatters for generated meal plans."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from macrotrack.planner.models import MealPlanResult


def format_delta_percent(error: float) -> str:
    """Render a signed relative error like "+3.2%", "-1.0%" or "0.0%"."""
    pct = round(error * 100, 1)
    if pct == 0:
        return "0.0%"
    return f"{pct:+.1f}%"


def plan_to_dict(result: MealPlanResult) -> dict:
    """Convert a plan result to a JSON-serializable dict."""
    return {
        "items": [
            {
                "slot": item.slot,
                "role": item.role.value,
                "food_id": item.food.food_id,
                "food": item.food.name,
                "grams": item.grams,
                "calories": round(item.calories, 1),
                "protein": round(item.protein, 1),
                "carbs": round(item.carbs, 1),
                "fat": round(item.fat, 1),
            }
            for item in result.items
        ],
        "totals": {
            "calories": round(result.totals.calories, 1),
            "protein": round(result.totals.protein, 1),
            "carbs": round(result.totals.carbs, 1),
            "fat": round(result.totals.fat, 1),
        },
        "targets": result.targets.to_dict(),
        "errors": {dim: round(err, 4) for dim, err in result.errors.items()},
        "deltas": {dim: format_delta_percent(err) for dim, err in result.errors.items()},
        "score": round(result.score, 4),
        "attempts_used": result.attempts_used,
        "within_tolerance": result.within_tolerance,
        "seed": result.seed,
    }


class TableFormatter:
    """Format plans as Rich tables for terminal display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the formatter.

        Args:
            console: Rich console for output. If None, creates a new one.
        """
        self.console = console or Console()

    def format(self, result: MealPlanResult) -> None:
        """Print one table per slot followed by totals against targets."""
        status_color = "green" if result.within_tolerance else "yellow"
        status = "WITHIN TOLERANCE" if result.within_tolerance else "BEST EFFORT"
        header = (
            f"[bold]MEAL PLAN[/bold] - {datetime.now().strftime('%Y-%m-%d %H:%M')}\n"
            f"Status: [{status_color}]{status}[/{status_color}] "
            f"(score {result.score:.3f}, {result.attempts_used} attempts)"
        )
        self.console.print(Panel(header, title="Meal Plan"))

        for slot_name in result.slot_names:
            items = result.items_for_slot(slot_name)
            if not items:
                continue
            table = Table(title=slot_name)
            table.add_column("Food", style="cyan", max_width=40)
            table.add_column("Role")
            table.add_column("Grams", justify="right")
            table.add_column("Kcal", justify="right")
            table.add_column("Protein", justify="right")
            table.add_column("Carbs", justify="right")
            table.add_column("Fat", justify="right")
            for item in items:
                table.add_row(
                    item.food.name[:40],
                    item.role.value,
                    str(item.grams),
                    f"{item.calories:.0f}",
                    f"{item.protein:.1f}",
                    f"{item.carbs:.1f}",
                    f"{item.fat:.1f}",
                )
            self.console.print(table)

        totals = Table(title="Totals vs Targets")
        totals.add_column("")
        totals.add_column("Actual", justify="right")
        totals.add_column("Target", justify="right")
        totals.add_column("Delta", justify="right")
        rows = [
            ("Calories", result.totals.calories, result.targets.kcal, "calories"),
            ("Protein (g)", result.totals.protein, result.targets.protein, "protein"),
            ("Carbs (g)", result.totals.carbs, result.targets.carbs, "carbs"),
            ("Fat (g)", result.totals.fat, result.targets.fat, "fat"),
        ]
        for label, actual, target, dim in rows:
            totals.add_row(
                label,
                f"{actual:.1f}",
                f"{target:.1f}",
                format_delta_percent(result.errors.get(dim, 0.0)),
            )
        self.console.print(totals)


class JSONFormatter:
    """Format plans as JSON for programmatic use."""

    def format(self, result: MealPlanResult) -> str:
        return json.dumps(plan_to_dict(result), indent=2)


class MarkdownFormatter:
    """Format plans as Markdown."""

    def format(self, result: MealPlanResult) -> str:
        """Return Markdown string."""
        lines = ["# Daily Meal Plan", ""]

        for slot_name in result.slot_names:
            items = result.items_for_slot(slot_name)
            if not items:
                continue
            lines.extend(
                [
                    f"## {slot_name}",
                    "",
                    "| Food | Grams | Kcal | P | C | F |",
                    "|------|-------|------|---|---|---|",
                ]
            )
            for item in items:
                lines.append(
                    f"| {item.food.name} | {item.grams}g | {item.calories:.0f} | "
                    f"{item.protein:.1f} | {item.carbs:.1f} | {item.fat:.1f} |"
                )
            lines.append("")

        lines.extend(["## Totals", "", "| | Actual | Target | Delta |", "|---|---|---|---|"])
        for label, actual, target, dim in (
            ("Calories", result.totals.calories, result.targets.kcal, "calories"),
            ("Protein", result.totals.protein, result.targets.protein, "protein"),
            ("Carbs", result.totals.carbs, result.targets.carbs, "carbs"),
            ("Fat", result.totals.fat, result.targets.fat, "fat"),
        ):
            lines.append(
                f"| {label} | {actual:.1f} | {target:.1f} | "
                f"{format_delta_percent(result.errors.get(dim, 0.0))} |"
            )

        return "\n".join(lines)


def format_result(
    result: MealPlanResult,
    output_format: str = "table",
    console: Optional[Console] = None,
) -> Optional[str]:
    """Format a plan in the specified format.

    Args:
        result: Plan to format
        output_format: One of 'table', 'json', 'markdown'
        console: Rich console (for table format)

    Returns:
        Formatted string for json/markdown, None for table (prints directly)
    """
    if output_format == "table":
        TableFormatter(console).format(result)
        return None
    elif output_format == "json":
        return JSONFormatter().format(result)
    elif output_format == "markdown":
        return MarkdownFormatter().format(result)
    else:
        raise ValueError(f"Unknown output format: {output_format}")

"""CLI interface using Typer."""

from __future__ import annotations

import json
from datetime import date, datetime, time
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from macrotrack.config import get_settings
from macrotrack.db import get_db
from macrotrack.db.queries import CategoryQueries, FoodQueries, MealPlanQueries
from macrotrack.errors import PreconditionError
from macrotrack.logging_config import setup_logging
from macrotrack.tracking.body_calc import ACTIVITY_LABELS
from macrotrack.tracking.models import Profile, WeightLogEntry
from macrotrack.tracking.queries import (
    DietPhaseQueries,
    ProfileQueries,
    WeightQueries,
)

app = typer.Typer(
    help="Weight tracking, weekly macro targets and randomized meal plans",
    no_args_is_help=True,
)
console = Console()

# Subcommand groups
profile_app = typer.Typer(help="Manage the body profile")
weight_app = typer.Typer(help="Log and maintain weight/body-fat measurements")
phases_app = typer.Typer(help="View and edit diet-phase coefficients")
analytics_app = typer.Typer(help="Weekly body-composition and macro targets")
foods_app = typer.Typer(help="Manage the food catalog")
categories_app = typer.Typer(help="Manage food categories")
plan_app = typer.Typer(help="Generate daily meal plans")

app.add_typer(profile_app, name="profile")
app.add_typer(weight_app, name="weight")
app.add_typer(phases_app, name="phases")
app.add_typer(analytics_app, name="analytics")
app.add_typer(foods_app, name="foods")
app.add_typer(categories_app, name="categories")
app.add_typer(plan_app, name="plan")

PROFILE_OPTION_HELP = "Profile ID (default: first profile)"


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2, default=str)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def fail(
    command: str,
    error: Exception | str,
    json_output: bool,
    suggestions: Optional[list[str]] = None,
) -> NoReturn:
    """Report a failure the same way in table and JSON mode, then exit 1."""
    message = str(error)
    if json_output:
        response: dict = {"success": False, "command": command, "errors": [message]}
        label = getattr(error, "label", None)
        if label:
            response["error_label"] = label
        if suggestions:
            response["suggestions"] = suggestions
        output_json(response)
    else:
        console.print(f"[red]{message}[/red]")
        for suggestion in suggestions or []:
            console.print(f"Try: [cyan]{suggestion}[/cyan]")
    raise typer.Exit(1)


def _suggestions_for(error: Exception) -> Optional[list[str]]:
    label = getattr(error, "label", None)
    if label == "profile_not_found":
        return ["macrotrack profile set --height 180 --dob 1990-01-01 --sex Male --activity 1"]
    if label in ("no_weight_data", "targets_required"):
        return ["macrotrack weight add 80 --body-fat 20", "macrotrack analytics rebuild"]
    if label == "no_usable_foods":
        return ["macrotrack foods import foods.csv"]
    return None


def ensure_tables() -> None:
    """Ensure tables exist (idempotent)."""
    db = get_db()
    db.initialize_schema()


def _fmt(value: Optional[float], digits: int = 1) -> str:
    return f"{value:.{digits}f}" if value is not None else "-"


def _entry_dict(entry: WeightLogEntry) -> dict:
    return {
        "entry_id": entry.entry_id,
        "entry_at": entry.entry_at.isoformat(),
        "weight_kg": entry.weight_kg,
        "body_fat_pct": entry.body_fat_pct,
        "lean_mass_kg": round(entry.lean_mass_kg, 2) if entry.lean_mass_kg is not None else None,
    }


def _profile_dict(profile: Profile) -> dict:
    return {
        "profile_id": profile.profile_id,
        "height_cm": profile.height_cm,
        "date_of_birth": profile.date_of_birth.isoformat(),
        "sex": profile.sex,
        "activity_level": profile.activity_level,
        "role": profile.role,
    }


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging before any command runs."""
    setup_logging("DEBUG" if verbose else get_settings().logging.level)


# Callbacks for sub-apps to auto-create tables on first use
@profile_app.callback()
def profile_callback() -> None:
    """Ensure tables exist before any profile command."""
    ensure_tables()


@weight_app.callback()
def weight_callback() -> None:
    """Ensure tables exist before any weight command."""
    ensure_tables()


@phases_app.callback()
def phases_callback() -> None:
    """Ensure tables exist before any phases command."""
    ensure_tables()


@analytics_app.callback()
def analytics_callback() -> None:
    """Ensure tables exist before any analytics command."""
    ensure_tables()


@foods_app.callback()
def foods_callback() -> None:
    """Ensure tables exist before any foods command."""
    ensure_tables()


@categories_app.callback()
def categories_callback() -> None:
    """Ensure tables exist before any categories command."""
    ensure_tables()


@plan_app.callback()
def plan_callback() -> None:
    """Ensure tables exist before any plan command."""
    ensure_tables()


# ============================================================================
# Init
# ============================================================================


@app.command()
def init(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Create the database schema and seed meal types."""
    db = get_db()
    db.initialize_schema()

    if json_output:
        output_json({
            "success": True,
            "command": "init",
            "data": {"database": str(db.db_path)},
            "human_summary": f"Database ready at {db.db_path}",
        })
    else:
        console.print(f"[green]Database ready at {db.db_path}[/green]")
        console.print("Next: [cyan]macrotrack profile set ...[/cyan]")


# ============================================================================
# Profile
# ============================================================================


@profile_app.command("set")
def profile_set(
    height: Optional[float] = typer.Option(None, "--height", help="Height in cm"),
    dob: Optional[str] = typer.Option(None, "--dob", help="Date of birth (YYYY-MM-DD)"),
    sex: Optional[str] = typer.Option(None, "--sex", help="Male or Female"),
    activity: Optional[int] = typer.Option(
        None, "--activity", "-a", min=0, max=4, help="Activity level 0-4"
    ),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Create the profile or update any of its attributes."""
    db = get_db()
    try:
        with db.get_connection() as conn:
            existing = (
                ProfileQueries.get_profile(conn, profile_id)
                if profile_id is not None
                else ProfileQueries.get_default_profile(conn)
            )

            if existing is None:
                if profile_id is not None:
                    fail("profile set", f"Profile {profile_id} not found", json_output)
                if height is None or dob is None or sex is None:
                    fail(
                        "profile set",
                        "New profile needs --height, --dob and --sex",
                        json_output,
                    )
                profile = Profile(
                    profile_id=None,
                    height_cm=height,
                    date_of_birth=date.fromisoformat(dob),
                    sex=sex.capitalize(),
                    activity_level=activity if activity is not None else 0,
                )
                profile.profile_id = ProfileQueries.create_profile(conn, profile)
                DietPhaseQueries.ensure_defaults(conn, profile.profile_id)
                action = "Created"
            else:
                profile = Profile(
                    profile_id=existing.profile_id,
                    height_cm=height if height is not None else existing.height_cm,
                    date_of_birth=date.fromisoformat(dob) if dob else existing.date_of_birth,
                    sex=sex.capitalize() if sex else existing.sex,
                    activity_level=activity if activity is not None else existing.activity_level,
                    role=existing.role,
                )
                ProfileQueries.update_profile(conn, profile)
                action = "Updated"
    except ValueError as e:
        fail("profile set", e, json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "profile set",
            "data": _profile_dict(profile),
            "human_summary": f"{action} profile {profile.profile_id}",
        })
    else:
        console.print(f"[green]{action} profile {profile.profile_id}[/green]")


@profile_app.command("show")
def profile_show(
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the profile."""
    db = get_db()
    try:
        with db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, profile_id)
    except PreconditionError as e:
        fail("profile show", e, json_output, _suggestions_for(e))

    if json_output:
        output_json({
            "success": True,
            "command": "profile show",
            "data": _profile_dict(profile),
            "human_summary": f"Profile {profile.profile_id}",
        })
        return

    lines = [
        f"Height: {profile.height_cm:.0f} cm",
        f"Date of birth: {profile.date_of_birth.isoformat()}",
        f"Sex: {profile.sex}",
        f"Activity: {profile.activity_level} - "
        f"{ACTIVITY_LABELS.get(profile.activity_level, 'out of range (sedentary factor)')}",
    ]
    console.print(Panel("\n".join(lines), title=f"Profile {profile.profile_id}"))


# ============================================================================
# Weight log
# ============================================================================


@weight_app.command("add")
def weight_add(
    weight: float = typer.Argument(..., help="Weight in kg"),
    body_fat: Optional[float] = typer.Option(None, "--body-fat", "-b", help="Body fat %"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    time_str: Optional[str] = typer.Option(
        None, "--time", "-t", help="Time (HH:MM, default: now)"
    ),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Add a weight entry."""
    db = get_db()
    try:
        now = datetime.now()
        day = date.fromisoformat(date_str) if date_str else now.date()
        at = time.fromisoformat(time_str) if time_str else now.time().replace(microsecond=0)
        with db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, profile_id)
            entry = WeightQueries.add_entry(
                conn, profile.profile_id, datetime.combine(day, at), weight, body_fat  # type: ignore
            )
    except ValueError as e:
        fail("weight add", e, json_output, _suggestions_for(e))

    summary = f"Logged {weight:.1f} kg on {entry.entry_at:%Y-%m-%d %H:%M}"
    if entry.lean_mass_kg is not None:
        summary += f", lean mass {entry.lean_mass_kg:.1f} kg"

    if json_output:
        output_json({
            "success": True,
            "command": "weight add",
            "data": _entry_dict(entry),
            "human_summary": summary,
        })
    else:
        console.print(f"[green]{summary}[/green]")
        console.print("Run [cyan]macrotrack analytics rebuild[/cyan] to refresh weeks")


@weight_app.command("list")
def weight_list(
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Only the last N days"),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List weight-log entries."""
    db = get_db()
    try:
        with db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, profile_id)
            pid = profile.profile_id
            if days:
                entries = WeightQueries.list_recent(conn, pid, days)  # type: ignore
            else:
                entries = WeightQueries.list_entries(conn, pid)  # type: ignore
    except PreconditionError as e:
        fail("weight list", e, json_output, _suggestions_for(e))

    if json_output:
        output_json({
            "success": True,
            "command": "weight list",
            "data": {"entries": [_entry_dict(e) for e in entries]},
            "human_summary": f"{len(entries)} entries",
        })
        return

    if not entries:
        console.print("No weight entries found")
        return

    title = f"Weight Log (last {days} days)" if days else "Weight Log"
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Body fat", justify="right")
    table.add_column("Lean mass", justify="right", style="blue")
    for entry in entries:
        table.add_row(
            str(entry.entry_id),
            f"{entry.entry_at:%Y-%m-%d %H:%M}",
            f"{entry.weight_kg:.1f}",
            _fmt(entry.body_fat_pct),
            _fmt(entry.lean_mass_kg),
        )
    console.print(table)


@weight_app.command("update")
def weight_update(
    entry_id: int = typer.Argument(..., help="Entry ID"),
    weight: float = typer.Argument(..., help="Weight in kg"),
    body_fat: Optional[float] = typer.Option(None, "--body-fat", "-b", help="Body fat %"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Replace weight and body fat of an entry."""
    db = get_db()
    try:
        with db.get_connection() as conn:
            entry = WeightQueries.update_entry(conn, entry_id, weight, body_fat)
    except ValueError as e:
        fail("weight update", e, json_output)

    if entry is None:
        fail("weight update", f"Entry {entry_id} not found", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "weight update",
            "data": _entry_dict(entry),
            "human_summary": f"Updated entry {entry_id}",
        })
    else:
        console.print(f"[green]Updated entry {entry_id}[/green]")


@weight_app.command("delete")
def weight_delete(
    entry_id: int = typer.Argument(..., help="Entry ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Delete one weight entry."""
    db = get_db()
    with db.get_connection() as conn:
        deleted = WeightQueries.delete_entry(conn, entry_id)

    if not deleted:
        fail("weight delete", f"Entry {entry_id} not found", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "weight delete",
            "data": {"entry_id": entry_id},
            "human_summary": f"Deleted entry {entry_id}",
        })
    else:
        console.print(f"[green]Deleted entry {entry_id}[/green]")


@weight_app.command("clear")
def weight_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Confirm deletion"),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Delete every weight entry and all analytics weeks of the profile."""
    if not yes:
        fail("weight clear", "Refusing to clear the weight log without --yes", json_output)

    db = get_db()
    try:
        with db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, profile_id)
            logs, weeks = WeightQueries.clear_entries(conn, profile.profile_id)  # type: ignore
    except PreconditionError as e:
        fail("weight clear", e, json_output, _suggestions_for(e))

    summary = f"Deleted {logs} entries and {weeks} analytics weeks"
    if json_output:
        output_json({
            "success": True,
            "command": "weight clear",
            "data": {"deleted_entries": logs, "deleted_weeks": weeks},
            "human_summary": summary,
        })
    else:
        console.print(f"[green]{summary}[/green]")


@weight_app.command("stats")
def weight_stats(
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Only the last N days"),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show average weight, body fat and lean mass."""
    from macrotrack.tracking.diagnostics import format_weight_stats, summarize_weight_log

    db = get_db()
    try:
        with db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, profile_id)
            pid = profile.profile_id
            if days:
                entries = WeightQueries.list_recent(conn, pid, days)  # type: ignore
            else:
                entries = WeightQueries.list_entries(conn, pid)  # type: ignore
    except PreconditionError as e:
        fail("weight stats", e, json_output, _suggestions_for(e))

    stats = summarize_weight_log(entries, days)

    if json_output:
        output_json({
            "success": True,
            "command": "weight stats",
            "data": stats.to_dict(),
            "human_summary": f"{stats.entry_count} entries over {stats.days} days",
        })
    else:
        console.print(Panel(format_weight_stats(stats), title="Weight Stats"))


# ============================================================================
# Diet phases
# ============================================================================


@phases_app.command("list")
def phases_list(
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List diet phases (defaults are seeded if absent)."""
    db = get_db()
    try:
        with db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, profile_id)
            phases = DietPhaseQueries.list_phases(conn, profile.profile_id)  # type: ignore
    except PreconditionError as e:
        fail("phases list", e, json_output, _suggestions_for(e))

    if json_output:
        output_json({
            "success": True,
            "command": "phases list",
            "data": {
                "phases": [
                    {
                        "phase_id": p.phase_id,
                        "key": p.phase_key,
                        "protein_per_kg_lean": p.protein_per_kg_lean,
                        "fat_per_kg_body": p.fat_per_kg_body,
                        "calorie_offset": p.calorie_offset,
                    }
                    for p in phases
                ]
            },
            "human_summary": f"{len(phases)} diet phases",
        })
        return

    table = Table(title="Diet Phases")
    table.add_column("ID", style="dim")
    table.add_column("Phase", style="cyan")
    table.add_column("Protein g/kg lean", justify="right")
    table.add_column("Fat g/kg body", justify="right")
    table.add_column("Offset kcal", justify="right")
    for p in phases:
        table.add_row(
            str(p.phase_id),
            p.phase_key,
            f"{p.protein_per_kg_lean:.2f}",
            f"{p.fat_per_kg_body:.2f}",
            f"{p.calorie_offset:+d}",
        )
    console.print(table)


@phases_app.command("set")
def phases_set(
    key: str = typer.Argument(..., help="Phase key (cut, bulk, refeed, rest)"),
    protein: Optional[float] = typer.Option(None, "--protein", help="Protein g per kg lean mass"),
    fat: Optional[float] = typer.Option(None, "--fat", help="Fat g per kg body weight"),
    offset: Optional[float] = typer.Option(None, "--offset", help="Calorie offset (kcal/day)"),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Edit coefficients of a diet phase. Non-positive protein/fat values are ignored."""
    from macrotrack.errors import PhaseNotFoundError

    db = get_db()
    try:
        with db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, profile_id)
            pid = profile.profile_id
            phase = DietPhaseQueries.get_phase_by_key(conn, pid, key)  # type: ignore
            if phase is None:
                raise PhaseNotFoundError(f"Diet phase '{key}' not found")
            phase = DietPhaseQueries.update_phase(
                conn, pid, phase.phase_id, protein, fat, offset  # type: ignore
            )
    except PreconditionError as e:
        fail("phases set", e, json_output, _suggestions_for(e))

    summary = (
        f"{phase.phase_key}: {phase.protein_per_kg_lean:.2f} g/kg lean protein, "
        f"{phase.fat_per_kg_body:.2f} g/kg fat, {phase.calorie_offset:+d} kcal"
    )
    if json_output:
        output_json({
            "success": True,
            "command": "phases set",
            "data": {
                "phase_id": phase.phase_id,
                "key": phase.phase_key,
                "protein_per_kg_lean": phase.protein_per_kg_lean,
                "fat_per_kg_body": phase.fat_per_kg_body,
                "calorie_offset": phase.calorie_offset,
            },
            "human_summary": summary,
        })
    else:
        console.print(f"[green]{summary}[/green]")


# ============================================================================
# Weekly analytics
# ============================================================================


def _print_weeks(weeks: list) -> None:
    table = Table(title="Weekly Analytics")
    table.add_column("Wk", justify="right")
    table.add_column("Start", style="cyan")
    table.add_column("Phase")
    table.add_column("Workout", justify="center")
    table.add_column("Weight", justify="right")
    table.add_column("BF%", justify="right")
    table.add_column("Lean", justify="right")
    table.add_column("FFMI", justify="right")
    table.add_column("BMR", justify="right")
    table.add_column("TDEE", justify="right")
    table.add_column("Target", justify="right", style="green")
    table.add_column("P g", justify="right")
    table.add_column("C g", justify="right")
    table.add_column("F g", justify="right")

    for w in weeks:
        m = w.metrics
        table.add_row(
            str(w.week.week_number),
            w.week.week_start.isoformat(),
            w.phase_key or "-",
            "yes" if w.week.workout else "no",
            _fmt(m.avg_weight),
            _fmt(m.avg_body_fat),
            _fmt(m.lean_mass),
            _fmt(m.ffmi),
            _fmt(m.bmr_rest, 0),
            _fmt(m.bmr_motion, 0),
            _fmt(m.target_kcal, 0),
            _fmt(m.prot_g, 0),
            _fmt(m.carbs_g, 0),
            _fmt(m.fat_g, 0),
        )
    console.print(table)


@analytics_app.command("rebuild")
def analytics_rebuild(
    reset_phases: bool = typer.Option(
        False, "--reset-phases", help="Reset every week to the default phase"
    ),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Recompute the week set from the weight log (destructive)."""
    from macrotrack.tracking.weekly import rebuild_weekly_series

    db = get_db()
    try:
        with db.get_connection() as conn:
            weeks = rebuild_weekly_series(
                conn, profile_id, preserve_phases=False if reset_phases else None
            )
    except PreconditionError as e:
        fail("analytics rebuild", e, json_output, _suggestions_for(e))

    summary = f"Rebuilt {len(weeks)} analytics weeks"
    if json_output:
        output_json({
            "success": True,
            "command": "analytics rebuild",
            "data": {
                "weeks": [
                    {
                        "week_id": w.week_id,
                        "week_start": w.week_start.isoformat(),
                        "week_number": w.week_number,
                        "workout": w.workout,
                        "phase_id": w.phase_id,
                    }
                    for w in weeks
                ]
            },
            "human_summary": summary,
        })
    else:
        console.print(f"[green]{summary}[/green]")


@analytics_app.command("show")
def analytics_show(
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show weekly metrics, recomputed from the current data."""
    from macrotrack.tracking.weekly import list_weekly_analytics

    db = get_db()
    try:
        with db.get_connection() as conn:
            weeks = list_weekly_analytics(conn, profile_id)
    except PreconditionError as e:
        fail("analytics show", e, json_output, _suggestions_for(e))

    if json_output:
        output_json({
            "success": True,
            "command": "analytics show",
            "data": {"weeks": [w.to_dict() for w in weeks]},
            "human_summary": f"{len(weeks)} analytics weeks",
        })
        return

    if not weeks:
        console.print("No analytics weeks. Run [cyan]macrotrack analytics rebuild[/cyan]")
        return
    _print_weeks(weeks)


@analytics_app.command("set")
def analytics_set(
    week_start: str = typer.Argument(..., help="Week start date (YYYY-MM-DD)"),
    phase: Optional[str] = typer.Option(None, "--phase", "-p", help="Phase key or ID"),
    workout: Optional[bool] = typer.Option(None, "--workout/--no-workout", help="Workout week"),
    width: Optional[int] = typer.Option(None, "--width", help="Display width"),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Set the phase, workout flag or display width of a week."""
    from macrotrack.tracking.weekly import set_week_settings

    phase_id = int(phase) if phase and phase.isdigit() else None
    phase_key = phase if phase and phase_id is None else None

    db = get_db()
    try:
        start = date.fromisoformat(week_start)
        with db.get_connection() as conn:
            week = set_week_settings(
                conn,
                start,
                profile_id=profile_id,
                phase_id=phase_id,
                phase_key=phase_key,
                workout=workout,
                display_width=width,
            )
    except ValueError as e:
        fail("analytics set", e, json_output, _suggestions_for(e))

    if json_output:
        output_json({
            "success": True,
            "command": "analytics set",
            "data": week.to_dict(),
            "human_summary": f"Week {week.week.week_start} set to {week.phase_key}",
        })
    else:
        _print_weeks([week])


# ============================================================================
# Food catalog
# ============================================================================


@foods_app.command("add")
def foods_add(
    name: str = typer.Argument(..., help="Food name"),
    protein: float = typer.Option(..., "--protein", help="Protein g per 100g"),
    carbs: float = typer.Option(..., "--carbs", help="Carbs g per 100g"),
    fat: float = typer.Option(..., "--fat", help="Fat g per 100g"),
    calories: float = typer.Option(..., "--calories", help="kcal per 100g"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category name"),
    meal_type: Optional[str] = typer.Option(
        None, "--meal-type", "-m", help="breakfast, lunch, dinner or snack"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Add a food with macros per 100g."""
    db = get_db()
    try:
        with db.get_connection() as conn:
            owner = ProfileQueries.get_default_profile(conn)
            food = FoodQueries.add_food(
                conn,
                name,
                protein,
                carbs,
                fat,
                calories,
                category=category,
                meal_type=meal_type,
                created_by=owner.profile_id if owner else None,
            )
    except ValueError as e:
        fail("foods add", e, json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "foods add",
            "data": food.to_dict(),
            "human_summary": f"Added food {food.food_id}: {food.name}",
        })
    else:
        console.print(f"[green]Added food {food.food_id}: {food.name}[/green]")


@foods_app.command("list")
def foods_list(
    meal_type: Optional[str] = typer.Option(None, "--meal-type", "-m", help="Filter by meal type"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter by category"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Name contains"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List foods in the catalog."""
    db = get_db()
    with db.get_connection() as conn:
        foods = FoodQueries.list_foods(conn, meal_type=meal_type, category=category, search=search)

    if json_output:
        output_json({
            "success": True,
            "command": "foods list",
            "data": {"foods": [f.to_dict() for f in foods]},
            "human_summary": f"{len(foods)} foods",
        })
        return

    if not foods:
        console.print("No foods found")
        return

    table = Table(title=f"Foods ({len(foods)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan", max_width=40)
    table.add_column("kcal", justify="right")
    table.add_column("P", justify="right")
    table.add_column("C", justify="right")
    table.add_column("F", justify="right")
    table.add_column("Category")
    table.add_column("Meal")
    for f in foods:
        table.add_row(
            str(f.food_id),
            f.name[:40],
            f"{f.calories:.0f}",
            f"{f.protein:.1f}",
            f"{f.carbs:.1f}",
            f"{f.fat:.1f}",
            f.category or "-",
            f.meal_type or "-",
        )
    console.print(table)


@foods_app.command("delete")
def foods_delete(
    food_id: int = typer.Argument(..., help="Food ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Delete a food."""
    db = get_db()
    with db.get_connection() as conn:
        deleted = FoodQueries.delete_food(conn, food_id)

    if not deleted:
        fail("foods delete", f"Food {food_id} not found", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "foods delete",
            "data": {"food_id": food_id},
            "human_summary": f"Deleted food {food_id}",
        })
    else:
        console.print(f"[green]Deleted food {food_id}[/green]")


@foods_app.command("import")
def foods_import(
    csv_path: Path = typer.Argument(..., help="Path to foods CSV file"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Import foods from CSV (name,protein,carbs,fat,calories[,category][,meal_type])."""
    from macrotrack.data.food_loader import FoodLoader

    if not csv_path.exists():
        fail("foods import", f"File not found: {csv_path}", json_output)

    db = get_db()
    try:
        with db.get_connection() as conn:
            owner = ProfileQueries.get_default_profile(conn)
            loader = FoodLoader(conn, owner.profile_id if owner else None)
            counts = loader.load_from_csv(csv_path)
    except ValueError as e:
        fail("foods import", e, json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "foods import",
            "data": counts,
            "human_summary": f"Imported {counts['loaded']} foods",
        })
        return

    console.print(f"[green]Imported {counts['loaded']} foods[/green]")
    if counts["skipped_missing"]:
        console.print(
            f"[yellow]Skipped {counts['skipped_missing']} rows with missing values[/yellow]"
        )
    if counts["skipped_negative"]:
        console.print(
            f"[yellow]Skipped {counts['skipped_negative']} rows with negative macros[/yellow]"
        )
    if counts["skipped_meal_type"]:
        console.print(
            f"[yellow]Skipped {counts['skipped_meal_type']} rows with unknown meal types[/yellow]"
        )


@foods_app.command("export")
def foods_export(
    output: Path = typer.Argument(..., help="CSV file to write"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Export the catalog as a CSV in import format."""
    from macrotrack.data.food_loader import FoodLoader

    db = get_db()
    with db.get_connection() as conn:
        count = FoodLoader(conn).export_template(output)

    if json_output:
        output_json({
            "success": True,
            "command": "foods export",
            "data": {"path": str(output), "foods": count},
            "human_summary": f"Exported {count} foods to {output}",
        })
    else:
        console.print(f"[green]Exported {count} foods to {output}[/green]")


@categories_app.command("add")
def categories_add(
    name: str = typer.Argument(..., help="Category name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Add a food category."""
    db = get_db()
    with db.get_connection() as conn:
        owner = ProfileQueries.get_default_profile(conn)
        category_id = CategoryQueries.get_or_create(
            conn, name, owner.profile_id if owner else None
        )

    if json_output:
        output_json({
            "success": True,
            "command": "categories add",
            "data": {"category_id": category_id, "name": name},
            "human_summary": f"Category {category_id}: {name}",
        })
    else:
        console.print(f"[green]Category {category_id}: {name}[/green]")


@categories_app.command("list")
def categories_list(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List food categories with food counts."""
    db = get_db()
    with db.get_connection() as conn:
        categories = CategoryQueries.list_categories(conn)

    if json_output:
        output_json({
            "success": True,
            "command": "categories list",
            "data": {
                "categories": [
                    {"category_id": cid, "name": name, "food_count": count}
                    for cid, name, count in categories
                ]
            },
            "human_summary": f"{len(categories)} categories",
        })
        return

    table = Table(title="Food Categories")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Foods", justify="right")
    for cid, name, count in categories:
        table.add_row(str(cid), name, str(count))
    console.print(table)


# ============================================================================
# Meal plans
# ============================================================================


@plan_app.command("generate")
def plan_generate(
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible plans"),
    attempts: Optional[int] = typer.Option(None, "--attempts", help="Search attempts"),
    tolerance: Optional[float] = typer.Option(
        None, "--tolerance", help="Stop once every error is within this fraction"
    ),
    no_heuristics: bool = typer.Option(
        False, "--no-heuristics", help="Disable name-based slot preferences"
    ),
    save: bool = typer.Option(False, "--save", help="Save the plan"),
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: table, json, markdown"
    ),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Generate a meal plan for the latest analytics week's targets."""
    from macrotrack.planner.formatters import format_result, plan_to_dict
    from macrotrack.planner.generator import generate_meal_plan
    from macrotrack.planner.models import MacroTargets
    from macrotrack.planner.preferences import KeywordSlotPreference, NoSlotPreference
    from macrotrack.tracking.weekly import current_week

    settings = get_settings()
    mp = settings.meal_plan
    use_heuristics = mp.use_name_heuristics and not no_heuristics

    db = get_db()
    try:
        with db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, profile_id)
            week = current_week(conn, profile.profile_id)
            targets = MacroTargets.from_metrics(week.metrics)
            foods = FoodQueries.list_foods(conn)

            result = generate_meal_plan(
                targets,
                foods,
                seed=seed,
                attempts=attempts if attempts is not None else mp.attempts,
                tolerance=tolerance if tolerance is not None else mp.tolerance,
                min_grams=mp.min_grams,
                max_grams=mp.max_grams,
                gram_step=mp.gram_step,
                preference=KeywordSlotPreference() if use_heuristics else NoSlotPreference(),
                restrict_meal_types=mp.restrict_meal_types,
                timeout_seconds=mp.timeout_seconds,
            )

            saved = 0
            if save:
                saved = MealPlanQueries.save_plan(
                    conn, profile.profile_id, result, week_id=week.week.week_id  # type: ignore
                )
    except ValueError as e:
        fail("plan generate", e, json_output, _suggestions_for(e))

    if json_output:
        data = plan_to_dict(result)
        data["week_start"] = week.week.week_start.isoformat()
        data["saved_items"] = saved
        output_json({
            "success": True,
            "command": "plan generate",
            "data": data,
            "human_summary": (
                f"{len(result.items)} items, {result.totals.calories:.0f} kcal, "
                f"score {result.score:.3f}"
            ),
        })
        return

    fmt = output_format or settings.defaults.output_format
    try:
        rendered = format_result(result, fmt, console)
    except ValueError as e:
        fail("plan generate", e, json_output)
    if rendered is not None:
        print(rendered)
    if save:
        console.print(f"[green]Saved {saved} plan items[/green]")


@plan_app.command("list")
def plan_list(
    plan_date: Optional[str] = typer.Option(
        None, "--date", help="Plan timestamp as saved (default: latest plan)"
    ),
    profile_id: Optional[int] = typer.Option(None, "--profile", help=PROFILE_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show a saved meal plan."""
    db = get_db()
    try:
        with db.get_connection() as conn:
            profile = ProfileQueries.require_profile(conn, profile_id)
            rows = MealPlanQueries.list_plan_items(conn, profile.profile_id, plan_date)  # type: ignore
    except PreconditionError as e:
        fail("plan list", e, json_output, _suggestions_for(e))

    if rows and plan_date is None:
        plan_date = rows[0]["plan_date"]
        rows = [r for r in rows if r["plan_date"] == plan_date]

    items = [
        {
            "slot": r["slot_name"],
            "food_id": r["food_id"],
            "food": r["food_name"],
            "grams": r["grams"],
            "calories": round(r["calories"], 1),
            "protein": round(r["protein"], 1),
            "carbs": round(r["carbs"], 1),
            "fat": round(r["fat"], 1),
        }
        for r in rows
    ]

    if json_output:
        output_json({
            "success": True,
            "command": "plan list",
            "data": {"plan_date": plan_date, "items": items},
            "human_summary": f"{len(items)} saved plan items",
        })
        return

    if not items:
        console.print("No saved meal plans. Run [cyan]macrotrack plan generate --save[/cyan]")
        return

    table = Table(title=f"Saved Plan {plan_date}")
    table.add_column("Slot", style="cyan")
    table.add_column("Food", max_width=40)
    table.add_column("Grams", justify="right")
    table.add_column("Kcal", justify="right")
    table.add_column("P", justify="right")
    table.add_column("C", justify="right")
    table.add_column("F", justify="right")
    for item in items:
        table.add_row(
            item["slot"],
            (item["food"] or f"#{item['food_id']}")[:40],
            str(item["grams"]),
            f"{item['calories']:.0f}",
            f"{item['protein']:.1f}",
            f"{item['carbs']:.1f}",
            f"{item['fat']:.1f}",
        )
    console.print(table)


if __name__ == "__main__":
    app()

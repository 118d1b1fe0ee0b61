"""Summary statistics over the weight log."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional, Sequence

import numpy as np

from macrotrack.tracking.models import WeightLogEntry


@dataclass
class WeightLogStats:
    """Averages over a run of weight-log entries."""

    days: int
    entry_count: int
    average_weight: Optional[float]
    average_body_fat: Optional[float]
    average_lean_mass: Optional[float]

    def to_dict(self) -> dict:
        """Convert to a plain dict for JSON output."""
        return asdict(self)


def _average(values: Sequence[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return float(np.mean(present))


def summarize_weight_log(
    entries: Sequence[WeightLogEntry],
    days: Optional[int] = None,
) -> WeightLogStats:
    """Summarize entries, usually the trailing window returned by list_recent.

    Body fat and lean mass are averaged only over entries that carry a
    body-fat reading.

    Args:
        entries: Entries to summarize
        days: Window length the entries were drawn from (None: entry count)

    Returns:
        WeightLogStats with None averages when nothing contributes
    """
    return WeightLogStats(
        days=days if days is not None else len(entries),
        entry_count=len(entries),
        average_weight=_average([e.weight_kg for e in entries]),
        average_body_fat=_average([e.body_fat_pct for e in entries]),
        average_lean_mass=_average([e.lean_mass_kg for e in entries]),
    )


def format_weight_stats(stats: WeightLogStats) -> str:
    """Render stats as a short plain-text report."""

    def fmt(value: Optional[float], unit: str) -> str:
        return f"{value:.1f} {unit}" if value is not None else "n/a"

    lines = [
        f"Window: {stats.days} days ({stats.entry_count} entries)",
        f"Average weight:    {fmt(stats.average_weight, 'kg')}",
        f"Average body fat:  {fmt(stats.average_body_fat, '%')}",
        f"Average lean mass: {fmt(stats.average_lean_mass, 'kg')}",
    ]
    return "\n".join(lines)

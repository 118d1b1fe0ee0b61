"""Weight tracking and weekly analytics module.

This module turns a profile, its weight-log time series and a diet-phase
policy into per-week body-composition and macro-target numbers.

Key components:
- Mifflin-St Jeor BMR with fixed activity factors
- Diet phases (cut/bulk/refeed/rest) seeded per profile
- Weekly series rebuilt from the weight log, metrics computed on read
"""

from __future__ import annotations

from macrotrack.tracking.body_calc import WeekMetrics, compute_week_metrics
from macrotrack.tracking.models import (
    AnalyticsWeek,
    DietPhase,
    Profile,
    WeightLogEntry,
)
from macrotrack.tracking.weekly import (
    WeeklyAnalytics,
    current_week,
    list_weekly_analytics,
    rebuild_weekly_series,
    set_week_settings,
)

__all__ = [
    "AnalyticsWeek",
    "DietPhase",
    "Profile",
    "WeekMetrics",
    "WeeklyAnalytics",
    "WeightLogEntry",
    "compute_week_metrics",
    "current_week",
    "list_weekly_analytics",
    "rebuild_weekly_series",
    "set_week_settings",
]

"""Body composition and energy calculations for one analytics week.

Uses the Mifflin-St Jeor equation for resting metabolic rate, multiplied
by a fixed activity factor for maintenance expenditure, then applies a
diet-phase policy to derive calorie and macro targets.

Every value that cannot be resolved from its inputs is None and stays None
in everything derived from it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import date, datetime
from typing import Optional, Protocol, Sequence

import numpy as np

from macrotrack.tracking.models import Profile, WeightLogEntry

# Activity level multipliers (Harris-Benedict activity factors)
ACTIVITY_FACTORS: dict[int, float] = {
    0: 1.2,    # Sedentary
    1: 1.375,  # Lightly active
    2: 1.55,   # Moderately active
    3: 1.725,  # Very active
    4: 1.9,    # Extra active
}
DEFAULT_ACTIVITY_FACTOR = 1.2

ACTIVITY_LABELS: dict[int, str] = {
    0: "Sedentary (little or no exercise)",
    1: "Lightly active (light exercise 1-3 days/week)",
    2: "Moderately active (exercise 3-5 days/week)",
    3: "Very active (hard exercise 6-7 days/week)",
    4: "Extra active (very hard exercise & physical job)",
}

DAYS_PER_YEAR = 365.25
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9


class PhasePolicy(Protocol):
    """Anything carrying the three diet-phase coefficients."""

    protein_per_kg_lean: float
    fat_per_kg_body: float
    calorie_offset: int


@dataclass(frozen=True)
class WeekMetrics:
    """Computed body-composition and macro-target numbers for a week."""

    avg_weight: Optional[float] = None
    avg_body_fat: Optional[float] = None
    fat_mass: Optional[float] = None
    lean_mass: Optional[float] = None
    bmr_rest: Optional[float] = None
    bmr_motion: Optional[float] = None
    offset: Optional[int] = None
    target_kcal: Optional[float] = None
    prot_g: Optional[float] = None
    carbs_g: Optional[float] = None
    fat_g: Optional[float] = None
    cal_prot: Optional[float] = None
    cal_carbs: Optional[float] = None
    cal_fat: Optional[float] = None
    perc_prot: Optional[float] = None
    perc_carbs: Optional[float] = None
    perc_fat: Optional[float] = None
    ffmi: Optional[float] = None

    @classmethod
    def empty(cls) -> "WeekMetrics":
        """Return the all-null degenerate record."""
        return cls()

    @property
    def has_targets(self) -> bool:
        """True when calorie and all three macro targets resolved."""
        return None not in (self.target_kcal, self.prot_g, self.carbs_g, self.fat_g)

    def to_dict(self) -> dict:
        """Convert to a plain dict for JSON output."""
        return asdict(self)


def calculate_age_years(
    date_of_birth: Optional[date],
    as_of: datetime,
) -> Optional[float]:
    """Fractional age in years, using 365.25-day years.

    Args:
        date_of_birth: Birth date (None yields None)
        as_of: Moment the age is measured at

    Returns:
        Age in years or None
    """
    if date_of_birth is None:
        return None
    born = datetime(date_of_birth.year, date_of_birth.month, date_of_birth.day)
    elapsed = (as_of - born).total_seconds()
    return elapsed / (DAYS_PER_YEAR * 24 * 60 * 60)


def activity_factor(activity_level: Optional[int]) -> float:
    """Look up the activity multiplier, falling back to sedentary."""
    return ACTIVITY_FACTORS.get(activity_level, DEFAULT_ACTIVITY_FACTOR)


def calculate_bmr(
    weight_kg: float,
    height_cm: float,
    age_years: float,
    sex: str,
) -> float:
    """Calculate resting metabolic rate using the Mifflin-St Jeor equation.

    Args:
        weight_kg: Body weight in kg
        height_cm: Height in cm
        age_years: Age in (fractional) years
        sex: "Male" or "Female"

    Returns:
        BMR in kcal per day
    """
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age_years
    if sex == "Male":
        return base + 5
    return base - 161


def _mean(values: Sequence[Optional[float]]) -> Optional[float]:
    nums = [v for v in values if v is not None]
    if not nums:
        return None
    return float(np.mean(nums))


def compute_week_metrics(
    profile: Optional[Profile],
    entries: Sequence[WeightLogEntry],
    phase: Optional[PhasePolicy],
    as_of: Optional[datetime] = None,
) -> WeekMetrics:
    """Derive one week's metrics from profile, measurements and phase.

    This is a pure function of its arguments: identical inputs always give
    an identical record, including the all-null form.

    Args:
        profile: Body attributes (None yields the all-null record)
        entries: Weight-log entries inside the week window
        phase: Diet phase coefficients (None yields the all-null record)
        as_of: Moment used for the age calculation (default: now)

    Returns:
        WeekMetrics with unresolvable fields left as None
    """
    if profile is None or phase is None or not entries:
        return WeekMetrics.empty()

    if as_of is None:
        as_of = datetime.now()

    avg_weight = _mean([e.weight_kg for e in entries])
    avg_body_fat = _mean([e.body_fat_pct for e in entries])

    fat_mass = None
    lean_mass = None
    if avg_weight is not None and avg_body_fat is not None:
        fat_mass = avg_weight * (avg_body_fat / 100)
        lean_mass = avg_weight - fat_mass

    height_cm = profile.height_cm
    height_m = height_cm / 100 if height_cm and height_cm > 0 else None
    age_years = calculate_age_years(profile.date_of_birth, as_of)

    ffmi = None
    if lean_mass is not None and height_m:
        ffmi = lean_mass / (height_m * height_m)

    bmr_rest = None
    bmr_motion = None
    if avg_weight is not None and height_m and age_years is not None:
        bmr_rest = calculate_bmr(avg_weight, height_cm, age_years, profile.sex)
        bmr_motion = bmr_rest * activity_factor(profile.activity_level)

    offset = phase.calorie_offset
    partial = WeekMetrics(
        avg_weight=avg_weight,
        avg_body_fat=avg_body_fat,
        fat_mass=fat_mass,
        lean_mass=lean_mass,
        bmr_rest=bmr_rest,
        bmr_motion=bmr_motion,
        offset=offset,
        ffmi=ffmi,
    )

    if bmr_motion is None or avg_weight is None or lean_mass is None:
        return partial

    target_kcal = bmr_motion + offset
    if target_kcal <= 0:
        return replace(partial, target_kcal=target_kcal)

    prot_g = phase.protein_per_kg_lean * lean_mass
    fat_g = phase.fat_per_kg_body * avg_weight
    cal_prot = prot_g * KCAL_PER_G_PROTEIN
    cal_fat = fat_g * KCAL_PER_G_FAT
    # Carbs take the remainder; protein and fat are never cut to make room
    cal_carbs = max(target_kcal - (cal_prot + cal_fat), 0.0)
    carbs_g = cal_carbs / KCAL_PER_G_CARBS

    return WeekMetrics(
        avg_weight=avg_weight,
        avg_body_fat=avg_body_fat,
        fat_mass=fat_mass,
        lean_mass=lean_mass,
        bmr_rest=bmr_rest,
        bmr_motion=bmr_motion,
        offset=offset,
        target_kcal=target_kcal,
        prot_g=prot_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        cal_prot=cal_prot,
        cal_carbs=cal_carbs,
        cal_fat=cal_fat,
        perc_prot=cal_prot / target_kcal * 100,
        perc_carbs=cal_carbs / target_kcal * 100,
        perc_fat=cal_fat / target_kcal * 100,
        ffmi=ffmi,
    )

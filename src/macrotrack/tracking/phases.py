"""Default diet-phase coefficients.

Each phase carries protein grams per kg of lean mass, fat grams per kg of
body weight and a signed calorie offset (kcal/day) applied to estimated
maintenance expenditure. Carbohydrates absorb whatever energy is left.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PhaseCoefficients:
    """Coefficients for one diet phase."""

    protein_per_kg_lean: float
    fat_per_kg_body: float
    calorie_offset: int


DEFAULT_DIET_PHASES: dict[str, PhaseCoefficients] = {
    "cut": PhaseCoefficients(2.1, 0.25, -1500),
    "bulk": PhaseCoefficients(1.8, 0.30, 500),
    "refeed": PhaseCoefficients(1.9, 0.25, 200),
    "rest": PhaseCoefficients(1.9, 0.30, -600),
}

DEFAULT_PHASE_KEY = "cut"


def missing_phase_keys(existing_keys: set[str]) -> list[str]:
    """Return default phase keys not yet present, in declaration order."""
    return [key for key in DEFAULT_DIET_PHASES if key not in existing_keys]

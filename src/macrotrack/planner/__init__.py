"""Randomized meal-plan generation.

Assembles a day of six slots (three main meals, three snacks) from a food
catalog so that total calories and macros approximate daily targets:

- Foods are bucketed by which macro contributes the most calories
- Each slot gets a protein, carb and fat pick sized from its calorie share
- Many random attempts are scored; the best plan is always returned
"""

from __future__ import annotations

from macrotrack.planner.generator import generate_meal_plan
from macrotrack.planner.models import (
    DEFAULT_SLOTS,
    Food,
    MacroRole,
    MacroTargets,
    MealPlanResult,
    PlanItem,
    PlanTotals,
    SlotDefinition,
)
from macrotrack.planner.preferences import KeywordSlotPreference, NoSlotPreference

__all__ = [
    "DEFAULT_SLOTS",
    "Food",
    "KeywordSlotPreference",
    "MacroRole",
    "MacroTargets",
    "MealPlanResult",
    "NoSlotPreference",
    "PlanItem",
    "PlanTotals",
    "SlotDefinition",
    "generate_meal_plan",
]

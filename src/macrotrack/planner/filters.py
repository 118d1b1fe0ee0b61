"""Candidate-pool filtering and macro-dominance classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from macrotrack.planner.models import Food, MacroRole

# Categories never suggested in any plan (matched case-insensitively)
DENIED_CATEGORIES: frozenset[str] = frozenset(
    {
        "alcohol",
        "alcoholic beverages",
        "alcolici",
        "bevande alcoliche",
        "wine",
        "beer",
        "spirits",
        "liquori",
        "cocktail",
    }
)


@dataclass
class DominanceBuckets:
    """Foods grouped by the macro contributing the most calories.

    Ties favor protein, then carbs. ``snack_preferred`` holds foods where
    carbs or fat out-contribute protein.
    """

    protein: list[Food] = field(default_factory=list)
    carbs: list[Food] = field(default_factory=list)
    fat: list[Food] = field(default_factory=list)
    snack_preferred: list[Food] = field(default_factory=list)

    def for_role(self, role: MacroRole) -> list[Food]:
        if role is MacroRole.PROTEIN:
            return self.protein
        if role is MacroRole.CARBS:
            return self.carbs
        return self.fat


def usable_foods(foods: Iterable[Food]) -> list[Food]:
    """Foods with positive calories; portions are derived from calories."""
    return [f for f in foods if f.calories > 0]


def is_denied(food: Food, denied: frozenset[str] = DENIED_CATEGORIES) -> bool:
    """True if the food's category is on the deny list. Uncategorized is never denied."""
    if food.category is None:
        return False
    return food.category.strip().lower() in denied


def allowed_foods(
    foods: Iterable[Food],
    denied: frozenset[str] = DENIED_CATEGORIES,
) -> list[Food]:
    """Usable foods minus denied categories."""
    return [f for f in usable_foods(foods) if not is_denied(f, denied)]


def filter_by_meal_type(foods: Iterable[Food], meal_key: Optional[str]) -> list[Food]:
    """Keep foods tagged for the meal or not tagged at all."""
    if meal_key is None:
        return list(foods)
    key = meal_key.lower()
    return [f for f in foods if f.meal_type is None or f.meal_type.lower() == key]


def classify_by_dominance(foods: Iterable[Food]) -> DominanceBuckets:
    """Split foods into protein/carb/fat-rich buckets.

    Foods whose macros contribute no calories are left out of every bucket.
    """
    buckets = DominanceBuckets()
    for food in foods:
        prot, carb, fat = food.protein_kcal, food.carbs_kcal, food.fat_kcal
        if prot + carb + fat <= 0:
            continue

        if prot >= carb and prot >= fat:
            buckets.protein.append(food)
        elif carb > prot and carb >= fat:
            buckets.carbs.append(food)
        else:
            buckets.fat.append(food)

        if carb > prot or fat > prot:
            buckets.snack_preferred.append(food)
    return buckets

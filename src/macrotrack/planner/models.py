"""Data models for randomized meal-plan generation.

A day is split into fixed slots, each with a share of the daily calorie
target. Every slot is filled with three foods, one per macro role, and the
whole plan is then scored against the four daily targets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from macrotrack.errors import MissingTargetsError

if TYPE_CHECKING:
    from macrotrack.tracking.body_calc import WeekMetrics


class MacroRole(Enum):
    """Role a food plays inside a slot."""

    PROTEIN = "protein"
    CARBS = "carbs"
    FAT = "fat"


# Share of a slot's calorie budget allocated to each role
ROLE_SHARES: dict[MacroRole, float] = {
    MacroRole.PROTEIN: 0.35,
    MacroRole.CARBS: 0.40,
    MacroRole.FAT: 0.25,
}

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")


@dataclass
class Food:
    """A catalog food with macros per 100g."""

    food_id: int
    name: str
    protein: float
    carbs: float
    fat: float
    calories: float
    category: Optional[str] = None
    meal_type: Optional[str] = None
    created_by: Optional[int] = None

    def __post_init__(self) -> None:
        for attr in ("protein", "carbs", "fat", "calories"):
            if getattr(self, attr) < 0:
                raise ValueError(f"{attr} must be non-negative, got {getattr(self, attr)}")

    @property
    def protein_kcal(self) -> float:
        return self.protein * 4

    @property
    def carbs_kcal(self) -> float:
        return self.carbs * 4

    @property
    def fat_kcal(self) -> float:
        return self.fat * 9

    def to_dict(self) -> dict:
        return {
            "food_id": self.food_id,
            "name": self.name,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "calories": self.calories,
            "category": self.category,
            "meal_type": self.meal_type,
        }


@dataclass(frozen=True)
class MacroTargets:
    """Daily calorie and macro targets the generator aims for."""

    kcal: float
    protein: float
    carbs: float
    fat: float

    @classmethod
    def from_values(
        cls,
        kcal: Optional[float],
        protein: Optional[float],
        carbs: Optional[float],
        fat: Optional[float],
    ) -> "MacroTargets":
        """Build targets, refusing missing values or a non-positive calorie target.

        Raises:
            MissingTargetsError: If any target is None or kcal <= 0
        """
        if kcal is None or protein is None or carbs is None or fat is None:
            raise MissingTargetsError(
                "Calorie, protein, carbs and fat targets are all required"
            )
        if kcal <= 0:
            raise MissingTargetsError(f"Calorie target must be positive, got {kcal:.1f}")
        return cls(kcal=float(kcal), protein=float(protein), carbs=float(carbs), fat=float(fat))

    @classmethod
    def from_metrics(cls, metrics: "WeekMetrics") -> "MacroTargets":
        """Take targets from a computed analytics week."""
        return cls.from_values(metrics.target_kcal, metrics.prot_g, metrics.carbs_g, metrics.fat_g)

    def to_dict(self) -> dict:
        return {
            "calories": self.kcal,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
        }


@dataclass(frozen=True)
class SlotDefinition:
    """A meal-time slot of the day.

    Attributes:
        name: Display name (e.g., "Breakfast", "Snack 2")
        share: Fraction of the daily calorie target for this slot
        is_main: True for main meals, False for snacks
        meal_key: Meal-type classification used for catalog filtering
    """

    name: str
    share: float
    is_main: bool
    meal_key: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0 < self.share <= 1:
            raise ValueError(f"slot share must be in (0, 1], got {self.share}")
        if self.meal_key is not None and self.meal_key not in MEAL_TYPES:
            raise ValueError(f"unknown meal type for slot {self.name!r}: {self.meal_key}")


DEFAULT_SLOTS: tuple[SlotDefinition, ...] = (
    SlotDefinition("Breakfast", 0.20, True, "breakfast"),
    SlotDefinition("Snack 1", 0.10, False, "snack"),
    SlotDefinition("Lunch", 0.25, True, "lunch"),
    SlotDefinition("Snack 2", 0.10, False, "snack"),
    SlotDefinition("Dinner", 0.25, True, "dinner"),
    SlotDefinition("Snack 3", 0.10, False, "snack"),
)


@dataclass
class PlanItem:
    """One food portion in a plan."""

    slot: str
    role: MacroRole
    food: Food
    grams: int
    calories: float
    protein: float
    carbs: float
    fat: float

    @classmethod
    def from_portion(cls, slot: str, role: MacroRole, food: Food, grams: int) -> "PlanItem":
        """Derive calories and macros for a gram quantity."""
        factor = grams / 100
        return cls(
            slot=slot,
            role=role,
            food=food,
            grams=grams,
            calories=food.calories * factor,
            protein=food.protein * factor,
            carbs=food.carbs * factor,
            fat=food.fat * factor,
        )


@dataclass
class PlanTotals:
    """Summed calories and macros of a plan."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    @classmethod
    def of(cls, items: list[PlanItem]) -> "PlanTotals":
        totals = cls()
        for item in items:
            totals.calories += item.calories
            totals.protein += item.protein
            totals.carbs += item.carbs
            totals.fat += item.fat
        return totals


@dataclass
class MealPlanResult:
    """Best plan found by the generator plus its accuracy report.

    Attributes:
        items: Plan items in slot order
        totals: Summed calories and macros
        targets: Targets the plan was scored against
        errors: Signed relative error per dimension (calories, protein, carbs, fat)
        score: Maximum absolute relative error
        attempts_used: Number of attempts run before stopping
        within_tolerance: True if score reached the tolerance
        seed: Seed used for the random source, if one was given
    """

    items: list[PlanItem]
    totals: PlanTotals
    targets: MacroTargets
    errors: dict[str, float]
    score: float
    attempts_used: int
    within_tolerance: bool
    seed: Optional[int] = None
    slot_names: list[str] = field(default_factory=list)

    def items_for_slot(self, slot_name: str) -> list[PlanItem]:
        return [item for item in self.items if item.slot == slot_name]

"""Randomized multi-start meal-plan search.

Each attempt fills every slot with a protein, a carb and a fat pick drawn
from that slot's candidate pool, sizes the portions from the slot's
calorie budget, then rescales the whole day toward the calorie target.
Attempts are scored by their worst relative error across calories and the
three macros; the best plan seen is always returned.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from macrotrack.errors import MissingTargetsError, NoUsableFoodsError
from macrotrack.planner.filters import (
    DENIED_CATEGORIES,
    DominanceBuckets,
    allowed_foods,
    classify_by_dominance,
    filter_by_meal_type,
)
from macrotrack.planner.models import (
    DEFAULT_SLOTS,
    ROLE_SHARES,
    Food,
    MacroRole,
    MacroTargets,
    MealPlanResult,
    PlanItem,
    PlanTotals,
    SlotDefinition,
)
from macrotrack.planner.preferences import NoSlotPreference, SlotPreference

logger = logging.getLogger(__name__)

ERROR_DIMENSIONS = ("calories", "protein", "carbs", "fat")

# Global rescale is only applied when target/actual falls strictly inside this band
RESCALE_BOUNDS = (0.5, 1.5)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""
    return int(math.floor(value + 0.5))


def clamp_grams(grams: float, min_grams: int = 30, max_grams: int = 400, step: int = 5) -> int:
    """Round, clamp to [min_grams, max_grams], then snap to a multiple of step."""
    clamped = max(min_grams, min(max_grams, round_half_up(grams)))
    return round_half_up(clamped / step) * step


def portion_grams(
    kcal_target: float,
    food: Food,
    min_grams: int = 30,
    max_grams: int = 400,
    step: int = 5,
) -> int:
    """Grams of a food that supply roughly kcal_target."""
    return clamp_grams(kcal_target / food.calories * 100, min_grams, max_grams, step)


def relative_errors(totals: PlanTotals, targets: MacroTargets) -> dict[str, float]:
    """Signed relative error per dimension; 0 where the target is not positive."""
    actual = np.array([totals.calories, totals.protein, totals.carbs, totals.fat])
    wanted = np.array([targets.kcal, targets.protein, targets.carbs, targets.fat])
    with np.errstate(divide="ignore", invalid="ignore"):
        rel = np.where(wanted > 0, (actual - wanted) / wanted, 0.0)
    return {dim: float(err) for dim, err in zip(ERROR_DIMENSIONS, rel)}


def score_errors(errors: dict[str, float]) -> float:
    """Worst absolute relative error."""
    return float(np.max(np.abs(list(errors.values()))))


@dataclass
class SlotPool:
    """Precomputed candidates for one slot."""

    slot: SlotDefinition
    foods: list[Food]
    buckets: DominanceBuckets
    preferred: dict[MacroRole, list[Food]]


def build_slot_pools(
    foods: Sequence[Food],
    slots: Sequence[SlotDefinition],
    preference: SlotPreference,
    restrict_meal_types: bool = True,
) -> list[SlotPool]:
    """Filter and classify the candidate pool of every slot once per run."""
    pools = []
    for slot in slots:
        candidates = (
            filter_by_meal_type(foods, slot.meal_key) if restrict_meal_types else list(foods)
        )
        pools.append(
            SlotPool(
                slot=slot,
                foods=candidates,
                buckets=classify_by_dominance(candidates),
                preferred={role: preference.preferred(slot, role, candidates) for role in MacroRole},
            )
        )
    return pools


def _choose(rng: random.Random, primary: Sequence[Food], fallback: Sequence[Food]) -> Food:
    return rng.choice(primary if primary else fallback)


def pick_slot_foods(
    pool: SlotPool,
    fallback: Sequence[Food],
    rng: random.Random,
) -> dict[MacroRole, Food]:
    """Pick one food per role for a slot.

    Preferred foods win over dominance buckets. Empty buckets fall back to
    snack-friendly foods (snack slots, carb and fat roles) and then to the
    whole allowed catalog. A carb or fat pick that repeats an earlier pick
    is re-rolled once from its bucket, excluding foods already used.
    """
    buckets = pool.buckets
    picks: dict[MacroRole, Food] = {}

    for role in MacroRole:
        preferred = pool.preferred.get(role)
        if preferred:
            picks[role] = rng.choice(preferred)
            continue
        role_fallback = fallback
        if not pool.slot.is_main and role is not MacroRole.PROTEIN and buckets.snack_preferred:
            role_fallback = buckets.snack_preferred
        picks[role] = _choose(rng, buckets.for_role(role), role_fallback)

    used = {picks[MacroRole.PROTEIN].food_id}
    for role in (MacroRole.CARBS, MacroRole.FAT):
        if picks[role].food_id in used:
            alternatives = [f for f in buckets.for_role(role) if f.food_id not in used]
            if alternatives:
                picks[role] = rng.choice(alternatives)
        used.add(picks[role].food_id)

    return picks


def assemble_plan(
    pools: Sequence[SlotPool],
    fallback: Sequence[Food],
    targets: MacroTargets,
    rng: random.Random,
    min_grams: int = 30,
    max_grams: int = 400,
    gram_step: int = 5,
) -> list[PlanItem]:
    """Build one candidate plan across all slots."""
    items: list[PlanItem] = []
    for pool in pools:
        slot_kcal = targets.kcal * pool.slot.share
        picks = pick_slot_foods(pool, fallback, rng)
        for role, food in picks.items():
            grams = portion_grams(slot_kcal * ROLE_SHARES[role], food, min_grams, max_grams, gram_step)
            items.append(PlanItem.from_portion(pool.slot.name, role, food, grams))
    return items


def rescale_plan(
    items: list[PlanItem],
    target_kcal: float,
    min_grams: int = 30,
    max_grams: int = 400,
    gram_step: int = 5,
) -> list[PlanItem]:
    """Uniformly scale all portions toward the calorie target.

    Returns the items unchanged when the plan has no calories or the
    target/actual ratio lies outside RESCALE_BOUNDS.
    """
    actual = PlanTotals.of(items).calories
    if actual <= 0:
        return items
    scale = target_kcal / actual
    low, high = RESCALE_BOUNDS
    if not low < scale < high:
        return items
    return [
        PlanItem.from_portion(
            item.slot,
            item.role,
            item.food,
            clamp_grams(item.grams * scale, min_grams, max_grams, gram_step),
        )
        for item in items
    ]


def generate_meal_plan(
    targets: Optional[MacroTargets],
    foods: Sequence[Food],
    slots: Sequence[SlotDefinition] = DEFAULT_SLOTS,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    attempts: int = 400,
    tolerance: float = 0.10,
    min_grams: int = 30,
    max_grams: int = 400,
    gram_step: int = 5,
    preference: Optional[SlotPreference] = None,
    restrict_meal_types: bool = True,
    timeout_seconds: Optional[float] = None,
    denied_categories: frozenset[str] = DENIED_CATEGORIES,
) -> MealPlanResult:
    """Search for a plan approximating the daily targets.

    Args:
        targets: Daily calorie and macro targets
        foods: Food catalog
        slots: Day partition (default: six fixed slots)
        rng: Random source; takes precedence over seed
        seed: Seed for a fresh random.Random when rng is None
        attempts: Maximum number of attempts
        tolerance: Stop early once the score is at or below this
        min_grams: Smallest portion
        max_grams: Largest portion
        gram_step: Portions are multiples of this
        preference: Slot preference strategy (default: none)
        restrict_meal_types: Only use foods tagged for the slot's meal (untagged always allowed)
        timeout_seconds: Optional wall-clock limit; the best plan so far is returned
        denied_categories: Categories never used

    Returns:
        MealPlanResult with the best plan found, even if it misses the tolerance

    Raises:
        MissingTargetsError: If targets are missing
        NoUsableFoodsError: If no food survives the calorie and category filters
        ValueError: If the search parameters are inconsistent
    """
    if targets is None:
        raise MissingTargetsError("Analytics targets are required to generate a meal plan")
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")
    if gram_step <= 0 or min_grams > max_grams:
        raise ValueError(f"invalid portion bounds [{min_grams}, {max_grams}] step {gram_step}")
    if min_grams % gram_step or max_grams % gram_step:
        raise ValueError("min_grams and max_grams must be multiples of gram_step")

    candidates = allowed_foods(foods, denied_categories)
    if not candidates:
        raise NoUsableFoodsError("No foods available to build a meal plan")

    if rng is None:
        rng = random.Random(seed)
    preference = preference or NoSlotPreference()
    pools = build_slot_pools(candidates, slots, preference, restrict_meal_types)

    deadline = time.monotonic() + timeout_seconds if timeout_seconds else None

    best_items: list[PlanItem] = []
    best_errors: dict[str, float] = {}
    best_score = math.inf
    used = 0

    for attempt in range(attempts):
        used = attempt + 1
        items = assemble_plan(pools, candidates, targets, rng, min_grams, max_grams, gram_step)
        items = rescale_plan(items, targets.kcal, min_grams, max_grams, gram_step)

        errors = relative_errors(PlanTotals.of(items), targets)
        score = score_errors(errors)
        if score < best_score:
            best_items, best_errors, best_score = items, errors, score
            logger.debug("Attempt %d: new best score %.4f", used, score)

        if score <= tolerance:
            logger.info("Plan within tolerance after %d attempts", used)
            break
        if deadline is not None and time.monotonic() >= deadline:
            logger.warning("Meal plan search timed out after %d attempts", used)
            break

    within = best_score <= tolerance
    logger.info(
        "Meal plan search: %d/%d attempts, best score %.4f (%s)",
        used,
        attempts,
        best_score,
        "within tolerance" if within else "best effort",
    )

    return MealPlanResult(
        items=best_items,
        totals=PlanTotals.of(best_items),
        targets=targets,
        errors=best_errors,
        score=best_score,
        attempts_used=used,
        within_tolerance=within,
        seed=seed,
        slot_names=[s.name for s in slots],
    )

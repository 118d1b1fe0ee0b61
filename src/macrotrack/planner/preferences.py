"""Swappable per-slot food preferences.

A preference narrows the candidates for one role of one slot, for example
bread-like foods for breakfast carbs. Returning an empty list means "no
preference" and the generator falls back to the dominance buckets.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from macrotrack.planner.models import Food, MacroRole, SlotDefinition

EGG_WHITE_TERMS = ("albume", "albumi", "egg white", "albumen", "eggwhite")
BREAD_TERMS = ("pane", "bread", "toast", "bagel", "brioche")
MEAT_TERMS = (
    "chicken", "beef", "pork", "veal", "lamb", "prosciutto", "prosciutti",
    "carne", "pollo", "manzo", "maiale", "agnello", "bistecca", "hamburger",
    "salame", "salsiccia", "tataki",
)
PASTA_TERMS = (
    "pasta", "spaghetti", "penne", "fusilli", "tagliatelle", "maccheroni",
    "linguine", "rigatoni", "farfalle", "lasagna", "gnocchi", "orecchiette",
)
VEGETABLE_TERMS = (
    "vegetable", "verdure", "verdura", "vegetales", "spinach", "lettuce",
    "broccoli", "zucchini", "zucchine", "peppers", "peperoni", "carrot",
    "carote", "insalata", "spinaci", "cavolo", "pomodoro",
)

# meal_key -> role -> name terms. Vegetables take the lunch fat role so
# they make it onto the plate.
DEFAULT_KEYWORD_RULES: dict[str, dict[MacroRole, tuple[str, ...]]] = {
    "breakfast": {
        MacroRole.PROTEIN: EGG_WHITE_TERMS,
        MacroRole.CARBS: BREAD_TERMS,
    },
    "lunch": {
        MacroRole.PROTEIN: MEAT_TERMS,
        MacroRole.CARBS: PASTA_TERMS,
        MacroRole.FAT: VEGETABLE_TERMS,
    },
}


class SlotPreference(Protocol):
    """Strategy that proposes preferred foods for a slot role."""

    def preferred(
        self, slot: SlotDefinition, role: MacroRole, pool: Sequence[Food]
    ) -> list[Food]:
        ...


class NoSlotPreference:
    """Preference that never narrows anything."""

    def preferred(
        self, slot: SlotDefinition, role: MacroRole, pool: Sequence[Food]
    ) -> list[Food]:
        return []


class KeywordSlotPreference:
    """Prefer foods whose lowercased name contains one of a set of terms.

    Only applies to main slots.
    """

    def __init__(
        self,
        rules: Optional[Mapping[str, Mapping[MacroRole, Sequence[str]]]] = None,
    ):
        """Initialize with meal_key -> role -> terms rules.

        Args:
            rules: Keyword rules. If None, uses DEFAULT_KEYWORD_RULES.
        """
        self.rules = rules if rules is not None else DEFAULT_KEYWORD_RULES

    def preferred(
        self, slot: SlotDefinition, role: MacroRole, pool: Sequence[Food]
    ) -> list[Food]:
        if not slot.is_main or slot.meal_key is None:
            return []
        terms = self.rules.get(slot.meal_key, {}).get(role)
        if not terms:
            return []
        return [f for f in pool if any(t in f.name.lower() for t in terms)]

"""Food catalog import."""

from macrotrack.data.food_loader import FoodLoader, load_foods_from_csv

__all__ = ["FoodLoader", "load_foods_from_csv"]

"""Tests for CSV food imports."""

from __future__ import annotations

import pandas as pd
import pytest

from macrotrack.data.food_loader import FoodLoader, load_foods_from_csv
from macrotrack.db.queries import CategoryQueries, FoodQueries


@pytest.fixture
def foods_csv(tmp_path):
    path = tmp_path / "foods.csv"
    path.write_text(
        "Name,Protein,Carbs,Fat,Calories,Category,Meal_Type\n"
        "Chicken breast,31,0,3.6,165,Meat,Lunch\n"
        "Oats,17,66,7,389,Grains,breakfast\n"
        "Olive oil,0,0,100,884,,\n"
        "Mystery,10,,5,120,Misc,\n"
        "Broken,-1,10,1,50,Misc,\n"
        "Pizza,11,33,10,266,Fast food,brunch\n"
        ",1,1,1,10,Misc,\n"
    )
    return path


class TestFoodLoader:
    """Tests for FoodLoader.load_from_csv."""

    def test_counts(self, temp_db, foods_csv):
        with temp_db.get_connection() as conn:
            stats = load_foods_from_csv(foods_csv, conn)
        assert stats == {
            "loaded": 3,
            "skipped_missing": 2,
            "skipped_negative": 1,
            "skipped_meal_type": 1,
        }

    def test_rows_stored(self, temp_db, foods_csv):
        with temp_db.get_connection() as conn:
            FoodLoader(conn).load_from_csv(foods_csv)
            foods = {f.name: f for f in FoodQueries.list_foods(conn)}
        assert set(foods) == {"Chicken breast", "Oats", "Olive oil"}
        assert foods["Chicken breast"].meal_type == "lunch"
        assert foods["Chicken breast"].category == "Meat"
        assert foods["Olive oil"].category is None
        assert foods["Olive oil"].meal_type is None

    def test_categories_created_once(self, temp_db, foods_csv):
        with temp_db.get_connection() as conn:
            FoodLoader(conn).load_from_csv(foods_csv)
            names = [name for _, name, _ in CategoryQueries.list_categories(conn)]
        assert names == ["Grains", "Meat"]

    def test_missing_columns(self, temp_db, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("name,protein,carbs\nEgg,13,1\n")
        with temp_db.get_connection() as conn:
            with pytest.raises(ValueError, match="Missing required columns"):
                FoodLoader(conn).load_from_csv(path)

    def test_export_template_reimports(self, temp_db, foods_csv, tmp_path):
        out = tmp_path / "export.csv"
        with temp_db.get_connection() as conn:
            loader = FoodLoader(conn)
            loader.load_from_csv(foods_csv)
            assert loader.export_template(out) == 3
        df = pd.read_csv(out)
        assert list(df.columns) == [
            "name", "protein", "carbs", "fat", "calories", "category", "meal_type",
        ]
        assert df["name"].tolist() == ["Chicken breast", "Oats", "Olive oil"]

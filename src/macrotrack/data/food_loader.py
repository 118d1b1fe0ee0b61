"""Load and validate food catalog data from CSV files."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

import pandas as pd

from macrotrack.db.queries import FoodQueries, MealTypeQueries

logger = logging.getLogger(__name__)


class FoodLoader:
    """Handles importing foods from CSV files."""

    REQUIRED_COLUMNS = ["name", "protein", "carbs", "fat", "calories"]
    OPTIONAL_COLUMNS = ["category", "meal_type"]
    MACRO_COLUMNS = ["protein", "carbs", "fat", "calories"]

    def __init__(self, conn: sqlite3.Connection, created_by: Optional[int] = None):
        """Initialize the food loader.

        Args:
            conn: SQLite database connection
            created_by: Profile recorded as creator of imported foods
        """
        self.conn = conn
        self.created_by = created_by

    def load_from_csv(self, csv_path: Path) -> dict[str, int]:
        """Load foods from a CSV file.

        CSV format (macros per 100g):
            name,protein,carbs,fat,calories,category,meal_type
            Chicken breast,31,0,3.6,165,Meat,lunch

        Args:
            csv_path: Path to the CSV file

        Returns:
            Dict with counts: {'loaded': n, 'skipped_missing': m,
            'skipped_negative': k, 'skipped_meal_type': j}

        Raises:
            ValueError: If required columns are missing
        """
        df = pd.read_csv(csv_path)
        df.columns = [str(c).strip().lower() for c in df.columns]

        missing = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(
                f"Missing required columns: {missing}. "
                f"Required columns are: {self.REQUIRED_COLUMNS}"
            )

        for col in self.MACRO_COLUMNS:
            df[col] = pd.to_numeric(df[col], errors="coerce")

        known_meal_types = set(MealTypeQueries.list_names(self.conn))

        loaded = 0
        skipped_missing = 0
        skipped_negative = 0
        skipped_meal_type = 0

        for _, row in df.iterrows():
            name = row["name"]
            if pd.isna(name) or not str(name).strip() or row[self.MACRO_COLUMNS].isna().any():
                skipped_missing += 1
                continue

            if (row[self.MACRO_COLUMNS] < 0).any():
                skipped_negative += 1
                continue

            category = self._optional(row, "category")
            meal_type = self._optional(row, "meal_type")
            if meal_type is not None:
                meal_type = meal_type.lower()
                if meal_type not in known_meal_types:
                    skipped_meal_type += 1
                    continue

            FoodQueries.add_food(
                self.conn,
                name=str(name).strip(),
                protein=float(row["protein"]),
                carbs=float(row["carbs"]),
                fat=float(row["fat"]),
                calories=float(row["calories"]),
                category=category,
                meal_type=meal_type,
                created_by=self.created_by,
            )
            loaded += 1

        logger.info(
            "Imported %d foods from %s (%d missing values, %d negative, %d bad meal type)",
            loaded,
            csv_path,
            skipped_missing,
            skipped_negative,
            skipped_meal_type,
        )

        return {
            "loaded": loaded,
            "skipped_missing": skipped_missing,
            "skipped_negative": skipped_negative,
            "skipped_meal_type": skipped_meal_type,
        }

    @staticmethod
    def _optional(row: pd.Series, column: str) -> Optional[str]:
        value = row.get(column)
        if value is None or pd.isna(value) or not str(value).strip():
            return None
        return str(value).strip()

    def export_template(self, output_path: Path) -> int:
        """Export the current catalog as a CSV in import format.

        Args:
            output_path: Path to write the CSV

        Returns:
            Number of foods written
        """
        query = """
            SELECT f.name, f.protein, f.carbs, f.fat, f.calories,
                   c.name AS category, m.name AS meal_type
            FROM foods f
            LEFT JOIN food_categories c ON f.category_id = c.category_id
            LEFT JOIN meal_types m ON f.meal_type_id = m.meal_type_id
            ORDER BY f.name
        """
        df = pd.read_sql_query(query, self.conn)
        df.to_csv(output_path, index=False)
        return len(df)


def load_foods_from_csv(
    csv_path: Path, conn: sqlite3.Connection, created_by: Optional[int] = None
) -> dict[str, int]:
    """Convenience function to load foods from CSV.

    Args:
        csv_path: Path to foods CSV
        conn: Database connection
        created_by: Profile recorded as creator

    Returns:
        Dict with load statistics
    """
    loader = FoodLoader(conn, created_by)
    return loader.load_from_csv(csv_path)

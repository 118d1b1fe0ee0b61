"""Food catalog and saved meal-plan queries."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from macrotrack.planner.models import Food, MealPlanResult

_FOOD_SELECT = """
    SELECT
        f.food_id,
        f.name,
        f.protein,
        f.carbs,
        f.fat,
        f.calories,
        f.created_by,
        c.name AS category,
        m.name AS meal_type
    FROM foods f
    LEFT JOIN food_categories c ON f.category_id = c.category_id
    LEFT JOIN meal_types m ON f.meal_type_id = m.meal_type_id
"""


def _row_to_food(row: sqlite3.Row) -> Food:
    return Food(
        food_id=row["food_id"],
        name=row["name"],
        protein=row["protein"],
        carbs=row["carbs"],
        fat=row["fat"],
        calories=row["calories"],
        category=row["category"],
        meal_type=row["meal_type"],
        created_by=row["created_by"],
    )


class CategoryQueries:
    """Query functions for food_categories table."""

    @staticmethod
    def get_or_create(
        conn: sqlite3.Connection, name: str, created_by: Optional[int] = None
    ) -> int:
        """Return the id of a category, creating it if needed.

        Args:
            conn: Database connection
            name: Category name (matched case-insensitively)
            created_by: Profile creating the category

        Returns:
            category_id
        """
        name = name.strip()
        row = conn.execute(
            "SELECT category_id FROM food_categories WHERE LOWER(name) = LOWER(?)",
            (name,),
        ).fetchone()
        if row:
            return row[0]
        cursor = conn.execute(
            "INSERT INTO food_categories (name, created_by) VALUES (?, ?)",
            (name, created_by),
        )
        return cursor.lastrowid or 0

    @staticmethod
    def list_categories(conn: sqlite3.Connection) -> list[tuple[int, str, int]]:
        """List categories with food counts.

        Returns:
            List of (category_id, name, food_count) tuples
        """
        query = """
            SELECT c.category_id, c.name, COUNT(f.food_id) AS food_count
            FROM food_categories c
            LEFT JOIN foods f ON f.category_id = c.category_id
            GROUP BY c.category_id
            ORDER BY c.name
        """
        return [(r[0], r[1], r[2]) for r in conn.execute(query).fetchall()]


class MealTypeQueries:
    """Query functions for meal_types table."""

    @staticmethod
    def get_id(conn: sqlite3.Connection, name: str) -> Optional[int]:
        """Resolve a meal type name (breakfast/lunch/dinner/snack) to its id."""
        row = conn.execute(
            "SELECT meal_type_id FROM meal_types WHERE name = ?",
            (name.strip().lower(),),
        ).fetchone()
        return row[0] if row else None

    @staticmethod
    def list_names(conn: sqlite3.Connection) -> list[str]:
        return [r[0] for r in conn.execute("SELECT name FROM meal_types ORDER BY meal_type_id")]


class FoodQueries:
    """Query functions for foods table."""

    @staticmethod
    def add_food(
        conn: sqlite3.Connection,
        name: str,
        protein: float,
        carbs: float,
        fat: float,
        calories: float,
        category: Optional[str] = None,
        meal_type: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> Food:
        """Add a food with macros per 100g.

        Args:
            conn: Database connection
            name: Food name
            protein: Protein grams per 100g
            carbs: Carbohydrate grams per 100g
            fat: Fat grams per 100g
            calories: kcal per 100g
            category: Category name, created if missing
            meal_type: One of breakfast/lunch/dinner/snack
            created_by: Creating profile

        Returns:
            The stored Food

        Raises:
            ValueError: If a macro is negative or the meal type is unknown
        """
        food = Food(
            food_id=0,
            name=name,
            protein=protein,
            carbs=carbs,
            fat=fat,
            calories=calories,
            category=category,
            meal_type=meal_type,
            created_by=created_by,
        )

        category_id = None
        if category:
            category_id = CategoryQueries.get_or_create(conn, category, created_by)

        meal_type_id = None
        if meal_type:
            meal_type_id = MealTypeQueries.get_id(conn, meal_type)
            if meal_type_id is None:
                raise ValueError(f"Unknown meal type: {meal_type}")

        cursor = conn.execute(
            """
            INSERT INTO foods
            (name, protein, carbs, fat, calories, category_id, meal_type_id, created_by)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (name, protein, carbs, fat, calories, category_id, meal_type_id, created_by),
        )
        food.food_id = cursor.lastrowid or 0
        return food

    @staticmethod
    def get_food(conn: sqlite3.Connection, food_id: int) -> Optional[Food]:
        """Get a single food by ID."""
        row = conn.execute(_FOOD_SELECT + " WHERE f.food_id = ?", (food_id,)).fetchone()
        return _row_to_food(row) if row else None

    @staticmethod
    def list_foods(
        conn: sqlite3.Connection,
        meal_type: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Food]:
        """List foods, optionally filtered.

        Args:
            conn: Database connection
            meal_type: Only foods tagged with this meal type
            category: Only foods in this category (case-insensitive)
            search: Substring of the food name

        Returns:
            Foods ordered by name
        """
        query = _FOOD_SELECT + " WHERE 1 = 1"
        params: list = []

        if meal_type:
            query += " AND m.name = ?"
            params.append(meal_type.strip().lower())
        if category:
            query += " AND LOWER(c.name) = LOWER(?)"
            params.append(category.strip())
        if search:
            query += " AND f.name LIKE ?"
            params.append(f"%{search}%")

        query += " ORDER BY f.name"
        return [_row_to_food(row) for row in conn.execute(query, params).fetchall()]

    @staticmethod
    def delete_food(conn: sqlite3.Connection, food_id: int) -> bool:
        """Delete a food. Returns True if it existed."""
        cursor = conn.execute("DELETE FROM foods WHERE food_id = ?", (food_id,))
        return cursor.rowcount > 0


class MealPlanQueries:
    """Query functions for meal_plans table."""

    @staticmethod
    def save_plan(
        conn: sqlite3.Connection,
        profile_id: int,
        result: MealPlanResult,
        plan_date: Optional[datetime] = None,
        week_id: Optional[int] = None,
    ) -> int:
        """Persist a generated plan as flat rows.

        Args:
            conn: Database connection
            profile_id: Owning profile
            result: Generated plan
            plan_date: Plan timestamp (default: now)
            week_id: Analytics week the targets came from

        Returns:
            Number of rows written
        """
        plan_date = plan_date or datetime.now()
        rows = [
            (
                profile_id,
                plan_date.isoformat(timespec="seconds"),
                week_id,
                item.slot,
                item.food.food_id,
                item.grams,
                item.calories,
                item.protein,
                item.carbs,
                item.fat,
            )
            for item in result.items
        ]
        conn.executemany(
            """
            INSERT INTO meal_plans
            (profile_id, plan_date, week_id, slot_name, food_id, grams,
             calories, protein, carbs, fat)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
        return len(rows)

    @staticmethod
    def list_plan_items(
        conn: sqlite3.Connection, profile_id: int, plan_date: Optional[str] = None
    ) -> list[sqlite3.Row]:
        """List saved plan rows, latest plan date first.

        Args:
            conn: Database connection
            profile_id: Owning profile
            plan_date: Exact ISO plan timestamp to restrict to

        Returns:
            Rows joined with the food name
        """
        query = """
            SELECT mp.*, f.name AS food_name
            FROM meal_plans mp
            LEFT JOIN foods f ON mp.food_id = f.food_id
            WHERE mp.profile_id = ?
        """
        params: list = [profile_id]
        if plan_date:
            query += " AND mp.plan_date = ?"
            params.append(plan_date)
        query += " ORDER BY mp.plan_date DESC, mp.plan_item_id"
        return conn.execute(query, params).fetchall()

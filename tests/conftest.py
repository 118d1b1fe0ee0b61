"""Pytest fixtures for macrotrack tests."""

from __future__ import annotations

import random
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest

from macrotrack.config import settings as settings_module
from macrotrack.config.settings import Settings
from macrotrack.db.connection import DatabaseConnection, set_db
from macrotrack.planner.models import Food
from macrotrack.tracking.models import Profile
from macrotrack.tracking.queries import DietPhaseQueries, ProfileQueries


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Use built-in defaults instead of any config.yaml on the machine."""
    settings = Settings()
    monkeypatch.setattr(settings_module, "_settings", settings)
    return settings


@pytest.fixture
def temp_db():
    """Create a temporary database with schema."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    db = DatabaseConnection(db_path)
    db.initialize_schema()

    yield db

    # Cleanup
    db_path.unlink(missing_ok=True)


@pytest.fixture
def global_db(temp_db):
    """Install the temporary database as the global instance (for CLI tests)."""
    set_db(temp_db)
    yield temp_db
    set_db(None)


@pytest.fixture
def male_profile() -> Profile:
    """180 cm male, lightly active, born 1990-01-01."""
    return Profile(
        profile_id=1,
        height_cm=180,
        date_of_birth=date(1990, 1, 1),
        sex="Male",
        activity_level=1,
    )


@pytest.fixture
def stored_profile(temp_db) -> int:
    """Insert a profile with seeded diet phases; return its id."""
    with temp_db.get_connection() as conn:
        profile_id = ProfileQueries.create_profile(
            conn,
            Profile(
                profile_id=None,
                height_cm=180,
                date_of_birth=date(1990, 1, 1),
                sex="Male",
                activity_level=1,
            ),
        )
        DietPhaseQueries.ensure_defaults(conn, profile_id)
    return profile_id


@pytest.fixture
def as_of() -> datetime:
    """Fixed 'now' for age calculations."""
    return datetime(2025, 6, 1, 12, 0)


@pytest.fixture
def sample_foods() -> list[Food]:
    """Small catalog covering every dominance bucket and meal type."""
    return [
        Food(1, "Chicken breast", 31, 0, 3.6, 165, "Meat", "lunch"),
        Food(2, "Egg white", 11, 0.7, 0.2, 52, "Eggs", "breakfast"),
        Food(3, "Whole wheat bread", 13, 41, 3.4, 247, "Bakery", "breakfast"),
        Food(4, "Penne pasta", 13, 75, 1.5, 371, "Pasta", "lunch"),
        Food(5, "Broccoli", 2.8, 7, 0.4, 34, "Vegetables", None),
        Food(6, "Olive oil", 0, 0, 100, 884, "Oils", None),
        Food(7, "Greek yogurt", 10, 3.6, 0.4, 59, "Dairy", "snack"),
        Food(8, "Almonds", 21, 22, 49, 579, "Nuts", "snack"),
        Food(9, "Banana", 1.1, 23, 0.3, 89, "Fruit", "snack"),
        Food(10, "Salmon", 20, 0, 13, 208, "Fish", "dinner"),
        Food(11, "Brown rice", 2.7, 26, 1, 123, "Grains", "dinner"),
        Food(12, "Avocado", 2, 9, 15, 160, "Fruit", "dinner"),
        Food(13, "Oats", 17, 66, 7, 389, "Grains", "breakfast"),
        Food(14, "Peanut butter", 25, 20, 50, 588, "Nuts", "breakfast"),
        Food(15, "Red wine", 0.1, 2.6, 0, 85, "Wine", None),
        Food(16, "Cod fillet", 18, 0, 0.7, 82, "Fish", "dinner"),
    ]


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)

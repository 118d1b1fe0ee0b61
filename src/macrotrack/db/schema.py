"""SQLite database schema definitions."""

SCHEMA_SQL = """
-- Single-user installations hold one row; every other table scopes by profile_id
CREATE TABLE IF NOT EXISTS profiles (
    profile_id INTEGER PRIMARY KEY AUTOINCREMENT,
    height_cm REAL NOT NULL,
    date_of_birth DATE NOT NULL,
    sex TEXT NOT NULL CHECK(sex IN ('Male', 'Female')),
    activity_level INTEGER NOT NULL DEFAULT 0,
    role TEXT NOT NULL DEFAULT 'user',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Timestamped body measurements
CREATE TABLE IF NOT EXISTS weight_log (
    entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
    profile_id INTEGER NOT NULL,
    entry_at TIMESTAMP NOT NULL,
    weight_kg REAL NOT NULL,
    body_fat_pct REAL,
    FOREIGN KEY (profile_id) REFERENCES profiles(profile_id)
);

CREATE INDEX IF NOT EXISTS idx_weight_log_profile_date ON weight_log(profile_id, entry_at);

-- Macro policy per profile (seeded with cut/bulk/refeed/rest)
CREATE TABLE IF NOT EXISTS diet_phases (
    phase_id INTEGER PRIMARY KEY AUTOINCREMENT,
    profile_id INTEGER NOT NULL,
    phase_key TEXT NOT NULL,
    protein_per_kg_lean REAL NOT NULL,
    fat_per_kg_body REAL NOT NULL,
    calorie_offset INTEGER NOT NULL,
    FOREIGN KEY (profile_id) REFERENCES profiles(profile_id)
);

CREATE INDEX IF NOT EXISTS idx_diet_phases_profile_key ON diet_phases(profile_id, phase_key);

-- Per-week policy choices only; metrics are recomputed on read
CREATE TABLE IF NOT EXISTS analytics_weeks (
    week_id INTEGER PRIMARY KEY AUTOINCREMENT,
    profile_id INTEGER NOT NULL,
    week_start DATE NOT NULL,
    week_number INTEGER NOT NULL,
    workout BOOLEAN NOT NULL DEFAULT FALSE,
    phase_id INTEGER NOT NULL,
    display_width INTEGER,
    UNIQUE(profile_id, week_start),
    FOREIGN KEY (profile_id) REFERENCES profiles(profile_id),
    FOREIGN KEY (phase_id) REFERENCES diet_phases(phase_id)
);

-- Food catalog
CREATE TABLE IF NOT EXISTS food_categories (
    category_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    created_by INTEGER,
    FOREIGN KEY (created_by) REFERENCES profiles(profile_id)
);

CREATE TABLE IF NOT EXISTS meal_types (
    meal_type_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS foods (
    food_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    protein REAL NOT NULL CHECK(protein >= 0),
    carbs REAL NOT NULL CHECK(carbs >= 0),
    fat REAL NOT NULL CHECK(fat >= 0),
    calories REAL NOT NULL CHECK(calories >= 0),
    category_id INTEGER,
    meal_type_id INTEGER,
    created_by INTEGER,
    FOREIGN KEY (category_id) REFERENCES food_categories(category_id),
    FOREIGN KEY (meal_type_id) REFERENCES meal_types(meal_type_id),
    FOREIGN KEY (created_by) REFERENCES profiles(profile_id)
);

CREATE INDEX IF NOT EXISTS idx_foods_name ON foods(name);

-- Saved meal plans, one flat row per item
CREATE TABLE IF NOT EXISTS meal_plans (
    plan_item_id INTEGER PRIMARY KEY AUTOINCREMENT,
    profile_id INTEGER NOT NULL,
    plan_date TIMESTAMP NOT NULL,
    week_id INTEGER,
    slot_name TEXT NOT NULL,
    food_id INTEGER NOT NULL,
    grams INTEGER NOT NULL,
    calories REAL NOT NULL,
    protein REAL NOT NULL,
    carbs REAL NOT NULL,
    fat REAL NOT NULL,
    FOREIGN KEY (profile_id) REFERENCES profiles(profile_id),
    FOREIGN KEY (week_id) REFERENCES analytics_weeks(week_id),
    FOREIGN KEY (food_id) REFERENCES foods(food_id)
);

CREATE INDEX IF NOT EXISTS idx_meal_plans_profile_date ON meal_plans(profile_id, plan_date);

INSERT OR IGNORE INTO meal_types (name) VALUES ('breakfast');
INSERT OR IGNORE INTO meal_types (name) VALUES ('lunch');
INSERT OR IGNORE INTO meal_types (name) VALUES ('dinner');
INSERT OR IGNORE INTO meal_types (name) VALUES ('snack');
"""


def get_schema_sql() -> str:
    """Return the complete schema SQL."""
    return SCHEMA_SQL

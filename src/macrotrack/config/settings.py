"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".macrotrack"


def _default_db_path() -> Path:
    """Return the default database path."""
    return _default_config_dir() / "macrotrack.db"


@dataclass
class DatabaseConfig:
    """Database configuration."""

    path: Path = field(default_factory=_default_db_path)


@dataclass
class AnalyticsConfig:
    """Weekly analytics configuration."""

    default_phase: str = "cut"
    # Keep phase/workout/width of weeks whose start date survives a rebuild
    preserve_phases_on_rebuild: bool = True


@dataclass
class MealPlanConfig:
    """Meal plan search configuration."""

    attempts: int = 400
    tolerance: float = 0.10
    min_grams: int = 30
    max_grams: int = 400
    gram_step: int = 5
    timeout_seconds: Optional[float] = None
    use_name_heuristics: bool = True
    restrict_meal_types: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json"


@dataclass
class Settings:
    """Main application settings."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    meal_plan: MealPlanConfig = field(default_factory=MealPlanConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.macrotrack/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        if "database" in data:
            db_data = data["database"] or {}
            if "path" in db_data:
                settings.database.path = Path(db_data["path"]).expanduser()

        if "analytics" in data:
            an_data = data["analytics"] or {}
            if "default_phase" in an_data:
                settings.analytics.default_phase = str(an_data["default_phase"])
            if "preserve_phases_on_rebuild" in an_data:
                settings.analytics.preserve_phases_on_rebuild = bool(
                    an_data["preserve_phases_on_rebuild"]
                )

        if "meal_plan" in data:
            mp_data = data["meal_plan"] or {}
            if "attempts" in mp_data:
                settings.meal_plan.attempts = int(mp_data["attempts"])
            if "tolerance" in mp_data:
                settings.meal_plan.tolerance = float(mp_data["tolerance"])
            if "min_grams" in mp_data:
                settings.meal_plan.min_grams = int(mp_data["min_grams"])
            if "max_grams" in mp_data:
                settings.meal_plan.max_grams = int(mp_data["max_grams"])
            if "gram_step" in mp_data:
                settings.meal_plan.gram_step = int(mp_data["gram_step"])
            if mp_data.get("timeout_seconds") is not None:
                settings.meal_plan.timeout_seconds = float(mp_data["timeout_seconds"])
            if "use_name_heuristics" in mp_data:
                settings.meal_plan.use_name_heuristics = bool(
                    mp_data["use_name_heuristics"]
                )
            if "restrict_meal_types" in mp_data:
                settings.meal_plan.restrict_meal_types = bool(
                    mp_data["restrict_meal_types"]
                )

        if "logging" in data:
            log_data = data["logging"] or {}
            if "level" in log_data:
                settings.logging.level = str(log_data["level"]).upper()

        if "defaults" in data:
            def_data = data["defaults"] or {}
            if "output_format" in def_data:
                settings.defaults.output_format = def_data["output_format"]

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.macrotrack/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "database": {
                "path": str(self.database.path),
            },
            "analytics": {
                "default_phase": self.analytics.default_phase,
                "preserve_phases_on_rebuild": self.analytics.preserve_phases_on_rebuild,
            },
            "meal_plan": {
                "attempts": self.meal_plan.attempts,
                "tolerance": self.meal_plan.tolerance,
                "min_grams": self.meal_plan.min_grams,
                "max_grams": self.meal_plan.max_grams,
                "gram_step": self.meal_plan.gram_step,
                "timeout_seconds": self.meal_plan.timeout_seconds,
                "use_name_heuristics": self.meal_plan.use_name_heuristics,
                "restrict_meal_types": self.meal_plan.restrict_meal_types,
            },
            "logging": {
                "level": self.logging.level,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load()
    return _settings

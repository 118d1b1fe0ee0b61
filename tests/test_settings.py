"""Tests for YAML-backed settings."""

from __future__ import annotations

from pathlib import Path

from macrotrack.config import settings as settings_module
from macrotrack.config.settings import Settings, get_settings, reload_settings


class TestSettings:
    """Tests for loading and saving config.yaml."""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = Settings.load(tmp_path / "nope.yaml")
        assert settings.meal_plan.attempts == 400
        assert settings.meal_plan.tolerance == 0.10
        assert settings.analytics.default_phase == "cut"
        assert settings.analytics.preserve_phases_on_rebuild is True

    def test_partial_file_overrides_only_given_keys(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text(
            "meal_plan:\n"
            "  attempts: 50\n"
            "  timeout_seconds: 2.5\n"
            "analytics:\n"
            "  preserve_phases_on_rebuild: false\n"
            "logging:\n"
            "  level: debug\n"
        )
        settings = Settings.load(config)
        assert settings.meal_plan.attempts == 50
        assert settings.meal_plan.timeout_seconds == 2.5
        assert settings.meal_plan.min_grams == 30
        assert settings.analytics.preserve_phases_on_rebuild is False
        assert settings.logging.level == "DEBUG"

    def test_empty_file(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("")
        assert Settings.load(config).defaults.output_format == "table"

    def test_save_and_reload(self, tmp_path):
        config = tmp_path / "sub" / "config.yaml"
        settings = Settings()
        settings.database.path = tmp_path / "track.db"
        settings.meal_plan.tolerance = 0.05
        settings.meal_plan.use_name_heuristics = False
        settings.save(config)

        loaded = Settings.load(config)
        assert loaded.database.path == Path(tmp_path / "track.db")
        assert loaded.meal_plan.tolerance == 0.05
        assert loaded.meal_plan.use_name_heuristics is False
        assert loaded.meal_plan.timeout_seconds is None

    def test_global_instance(self, default_settings):
        assert get_settings() is default_settings

    def test_reload_reads_default_location(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings_module, "_default_config_dir", lambda: tmp_path)
        (tmp_path / "config.yaml").write_text("meal_plan:\n  attempts: 12\n")
        reloaded = reload_settings()
        assert reloaded.meal_plan.attempts == 12
        assert get_settings() is reloaded

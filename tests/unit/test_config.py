"""
Unit tests for environment-driven application settings.
"""

from pathlib import Path

import pytest

from supermorse.config import Settings, get_settings
from supermorse.drill import DrillSettings, ManualClock, ProgressionScheduler


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    for name in ("SUPERMORSE_DATA_DIR", "SUPERMORSE_DEFAULT_WPM", "SUPERMORSE_SESSION_MINUTES"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.default_curriculum == "international"
    assert settings.state_db_path == Path.home() / ".supermorse" / "state.db"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SUPERMORSE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SUPERMORSE_DEFAULT_WPM", "20")
    monkeypatch.setenv("SUPERMORSE_SESSION_MINUTES", "15")

    settings = get_settings()

    assert settings.state_db_path == tmp_path / "state.db"
    assert settings.default_wpm == 20
    assert settings.get_drill_defaults()["session_duration"] == 900


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_drill_defaults_from_environment(monkeypatch):
    monkeypatch.setenv("SUPERMORSE_DEFAULT_CURRICULUM", "Sweden")
    monkeypatch.setenv("SUPERMORSE_BREAK_MINUTES", "5")

    settings = DrillSettings.from_config()

    assert settings.curriculum == "Sweden"
    assert settings.break_duration == 300.0


def test_configured_curriculum_resolves_to_provider_spelling(monkeypatch):
    monkeypatch.setenv("SUPERMORSE_DEFAULT_CURRICULUM", "Sweden")

    with ProgressionScheduler(clock=ManualClock(), settings=DrillSettings.from_config()) as scheduler:
        scheduler.initialize()
        assert scheduler.get_settings().curriculum == "sweden"
        assert scheduler.state.known_symbols == ["K", "M"]

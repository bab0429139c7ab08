from app.core.config import Settings
from app.infrastructure.config.settings_provider import SettingsConfigProvider


def test_defaults():
    cfg = SettingsConfigProvider(Settings()).get()
    assert cfg.feature_enabled is True
    assert cfg.min_age == 0
    assert cfg.max_age == 0
    assert cfg.year_range_years == 120
    assert cfg.lock_fields_after_signup is False
    assert cfg.timezone == "UTC"


def test_year_range_is_clamped():
    assert SettingsConfigProvider(Settings(BIRTHDATE_YEAR_RANGE_YEARS=500)).get().year_range_years == 200
    assert SettingsConfigProvider(Settings(BIRTHDATE_YEAR_RANGE_YEARS=0)).get().year_range_years == 120
    assert SettingsConfigProvider(Settings(BIRTHDATE_YEAR_RANGE_YEARS=-3)).get().year_range_years == 120


def test_negative_ages_disable_the_check():
    cfg = SettingsConfigProvider(Settings(BIRTHDATE_MIN_AGE=-1, BIRTHDATE_MAX_AGE=-1)).get()
    assert cfg.min_age == 0
    assert cfg.max_age == 0


def test_missing_settings_fall_back_to_defaults():
    class Bare:
        BIRTHDATE_ENABLED = False

    cfg = SettingsConfigProvider(Bare()).get()
    assert cfg.feature_enabled is False
    assert cfg.min_age == 0
    assert cfg.year_range_years == 120


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("BIRTHDATE_MIN_AGE", "16")
    monkeypatch.setenv("BIRTHDATE_LOCK_AFTER_SIGNUP", "true")
    cfg = SettingsConfigProvider(Settings()).get()
    assert cfg.min_age == 16
    assert cfg.lock_fields_after_signup is True

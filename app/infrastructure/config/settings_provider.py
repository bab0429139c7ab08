import logging
from typing import Any, Optional

from ...application.ports.config_provider import BirthdateConfig, ConfigProvider, clamp_year_range
from ...core.config import Settings, get_settings

logger = logging.getLogger(__name__)

_DEFAULTS = BirthdateConfig()


class SettingsConfigProvider(ConfigProvider):
    """Reads the birthdate options from application settings.

    A missing or unreadable setting falls back to its default.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings

    def _safe(self, name: str, default: Any, cast=None) -> Any:
        settings = self._settings or get_settings()
        value = getattr(settings, name, None)
        if value is None:
            return default
        try:
            return cast(value) if cast else value
        except (TypeError, ValueError):
            logger.warning(f"Setting {name}={value!r} is unusable, using {default!r}")
            return default

    def get(self) -> BirthdateConfig:
        return BirthdateConfig(
            feature_enabled=self._safe("BIRTHDATE_ENABLED", _DEFAULTS.feature_enabled, bool),
            min_age=max(0, self._safe("BIRTHDATE_MIN_AGE", _DEFAULTS.min_age, int)),
            max_age=max(0, self._safe("BIRTHDATE_MAX_AGE", _DEFAULTS.max_age, int)),
            year_range_years=clamp_year_range(self._safe("BIRTHDATE_YEAR_RANGE_YEARS", _DEFAULTS.year_range_years, int)),
            lock_fields_after_signup=self._safe("BIRTHDATE_LOCK_AFTER_SIGNUP", _DEFAULTS.lock_fields_after_signup, bool),
            require_on_existing=self._safe("BIRTHDATE_REQUIRE_ON_EXISTING", _DEFAULTS.require_on_existing, bool),
            timezone=self._safe("BIRTHDATE_TIMEZONE", _DEFAULTS.timezone, str),
        )

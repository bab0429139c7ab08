from dataclasses import dataclass
from typing import Protocol


DEFAULT_YEAR_RANGE = 120
MAX_YEAR_RANGE = 200


@dataclass(frozen=True)
class BirthdateConfig:
    feature_enabled: bool = True
    min_age: int = 0
    max_age: int = 0
    year_range_years: int = DEFAULT_YEAR_RANGE
    lock_fields_after_signup: bool = False
    require_on_existing: bool = False
    timezone: str = "UTC"


class ConfigProvider(Protocol):
    def get(self) -> BirthdateConfig:
        ...


def clamp_year_range(value) -> int:
    """Year range limited to (0, 200]; unusable values fall back to 120."""
    try:
        range_years = int(value)
    except (TypeError, ValueError):
        return DEFAULT_YEAR_RANGE
    if range_years <= 0:
        return DEFAULT_YEAR_RANGE
    if range_years > MAX_YEAR_RANGE:
        return MAX_YEAR_RANGE
    return range_years

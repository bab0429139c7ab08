from dataclasses import dataclass, field
from functools import partial
from datetime import date, datetime
from typing import Any, Callable, Dict, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging
import re

from .field_registry import FieldMapping, FieldRegistry, attribute_key
from ..ports.user_repo import UserDto
from ...exceptions import CalendarConstructionError
from ...schemas import BirthdateFieldIds, UserBirthdateInfo

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def to_int(value: Any) -> int:
    """Lenient integer coercion: leading digits count, anything else is 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def build_date(year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except (ValueError, OverflowError) as e:
        raise CalendarConstructionError(year, month, day) from e


def local_today(timezone: str = "UTC") -> date:
    try:
        return datetime.now(ZoneInfo(timezone)).date()
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {timezone!r}, using UTC")
        return datetime.now(ZoneInfo("UTC")).date()


def resolve_date(mapping: FieldMapping, attributes: Optional[Mapping[str, Any]]) -> Optional[date]:
    if not mapping:
        return None

    attributes = attributes or {}
    day = to_int(attributes.get(attribute_key(mapping.get("day"))))
    month = to_int(attributes.get(attribute_key(mapping.get("month"))))
    year = to_int(attributes.get(attribute_key(mapping.get("year"))))

    if day <= 0 or month <= 0 or year <= 0:
        return None

    try:
        return build_date(year, month, day)
    except CalendarConstructionError:
        return None


def age_from_date(born: date, today: date) -> int:
    age = today.year - born.year
    had_birthday = (today.month, today.day) >= (born.month, born.day)
    return age if had_birthday else age - 1


def is_anniversary(born: date, today: date) -> bool:
    return today.month == born.month and today.day == born.day


@dataclass
class BirthdateService:
    """Read paths over a user's stored birth date attributes."""

    registry: FieldRegistry
    today: Callable[[], date] = field(default=partial(local_today, "UTC"))

    def date_for(self, user: UserDto) -> Optional[date]:
        return resolve_date(self.registry.resolve_mapping(), user.attributes)

    def computed_age(self, user: UserDto) -> Optional[int]:
        try:
            born = self.date_for(user)
        except Exception as e:
            logger.error(f"hbp_birthdate: age lookup failed for user {user.id}: {e}")
            return None
        if born is None:
            return None
        return age_from_date(born, self.today())

    def is_birthday_today(self, user: UserDto) -> bool:
        try:
            born = self.date_for(user)
        except Exception as e:
            logger.error(f"hbp_birthdate: birthday lookup failed for user {user.id}: {e}")
            return False
        if born is None:
            return False
        return is_anniversary(born, self.today())

    def current_field_mapping(self) -> Dict[str, int]:
        try:
            return self.registry.resolve_mapping()
        except Exception as e:
            logger.error(f"hbp_birthdate: field id lookup failed: {e}")
            return {}

    def user_summary(self, user: UserDto) -> UserBirthdateInfo:
        return UserBirthdateInfo(
            user_id=user.id,
            age=self.computed_age(user),
            birthday_today=self.is_birthday_today(user),
        )

    def site_fields(self) -> BirthdateFieldIds:
        return BirthdateFieldIds(**self.current_field_mapping())

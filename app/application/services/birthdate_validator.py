"""Decides whether a submitted birth date is acceptable.

The policy is an ordered list of ``(predicate, reason)`` guards; the first
guard whose predicate holds ends the decision. ``reason`` is ``None`` for
guards that accept.
"""
from dataclasses import dataclass, field
from datetime import date
from functools import cached_property
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
import logging

from .birthdate_service import age_from_date, build_date, to_int
from .field_registry import FieldMapping, FieldRegistry, MIN_YEAR, attribute_key
from ..ports.config_provider import BirthdateConfig, ConfigProvider
from ...exceptions import CalendarConstructionError
from ...schemas import BirthdateSubmission

logger = logging.getLogger(__name__)

MISSING = "missing"
INVALID_YEAR = "invalid_year"
INVALID_DATE = "invalid_date"
FUTURE_DATE = "future_date"
TOO_YOUNG = "too_young"
TOO_OLD = "too_old"


@dataclass(frozen=True)
class ValidationResult:
    accepted: bool
    reason: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def message_key(self) -> Optional[str]:
        if self.reason is None:
            return None
        return f"birthdate.errors.{self.reason}"


ACCEPT = ValidationResult(accepted=True)


@dataclass
class _Candidate:
    day: str
    month: str
    year: str
    is_new_record: bool
    config: BirthdateConfig
    mapping_resolved: bool
    today: date

    @property
    def blanks(self) -> int:
        return sum(1 for v in (self.day, self.month, self.year) if not v)

    @cached_property
    def born(self) -> Optional[date]:
        try:
            return build_date(to_int(self.year), to_int(self.month), to_int(self.day))
        except CalendarConstructionError:
            return None

    @cached_property
    def age(self) -> int:
        return age_from_date(self.born, self.today)


Guard = Tuple[Callable[[_Candidate], bool], Optional[str]]

GUARDS: List[Guard] = [
    (lambda c: not c.config.feature_enabled, None),
    (lambda c: not c.mapping_resolved, None),
    (lambda c: c.blanks == 3 and not (c.is_new_record or c.config.require_on_existing), None),
    (lambda c: c.blanks == 3, MISSING),
    (lambda c: c.blanks > 0, MISSING),
    (lambda c: not MIN_YEAR <= to_int(c.year) <= c.today.year, INVALID_YEAR),
    (lambda c: c.born is None, INVALID_DATE),
    (lambda c: c.born > c.today, FUTURE_DATE),
    (lambda c: c.config.min_age > 0 and c.age < c.config.min_age, TOO_YOUNG),
    (lambda c: c.config.max_age > 0 and c.age > c.config.max_age, TOO_OLD),
]


def _params_for(reason: str, config: BirthdateConfig) -> Dict[str, Any]:
    if reason == TOO_YOUNG:
        return {"min_age": config.min_age}
    if reason == TOO_OLD:
        return {"max_age": config.max_age}
    return {}


def decide(
    raw_day: Any,
    raw_month: Any,
    raw_year: Any,
    is_new_record: bool,
    config: BirthdateConfig,
    today: date,
    mapping_resolved: bool = True,
) -> ValidationResult:
    candidate = _Candidate(
        day=str(raw_day or "").strip(),
        month=str(raw_month or "").strip(),
        year=str(raw_year or "").strip(),
        is_new_record=is_new_record,
        config=config,
        mapping_resolved=mapping_resolved,
        today=today,
    )
    for predicate, reason in GUARDS:
        if predicate(candidate):
            if reason is None:
                return ACCEPT
            return ValidationResult(accepted=False, reason=reason, params=_params_for(reason, config))
    return ACCEPT


@dataclass
class BirthdateValidator:
    registry: FieldRegistry
    config_provider: ConfigProvider
    today: Callable[[], date] = date.today

    def validate(self, submission: BirthdateSubmission, mapping: Optional[FieldMapping] = None) -> ValidationResult:
        config = self.config_provider.get()
        if mapping is None:
            mapping = self.registry.resolve_mapping()
        result = decide(
            submission.day,
            submission.month,
            submission.year,
            submission.is_new_record,
            config,
            self.today(),
            mapping_resolved=bool(mapping),
        )
        if not result.accepted:
            logger.debug(f"hbp_birthdate: rejected submission ({result.reason})")
        return result

    def validate_attributes(self, attributes: Optional[Mapping[str, Any]], is_new_record: bool) -> ValidationResult:
        """Validate the birth date held in a user's attribute bag."""
        if not self.config_provider.get().feature_enabled:
            return ACCEPT
        mapping = self.registry.resolve_mapping()
        attributes = attributes or {}

        def raw(part: str) -> str:
            key = attribute_key(mapping.get(part))
            return str(attributes.get(key) or "") if key else ""

        submission = BirthdateSubmission(
            day=raw("day"),
            month=raw("month"),
            year=raw("year"),
            is_new_record=is_new_record,
        )
        return self.validate(submission, mapping=mapping)

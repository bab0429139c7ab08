"""Field identifier registry.

Keeps the cached ``{day, month, year} -> field id`` mapping consistent with
the field definitions actually stored. The cache may be empty, stale or
partially populated; the machine name of each definition is the only key
that is trusted.
"""
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional
import logging

from ..ports.field_store import FieldDefinition, FieldDefinitionStore, FieldOptionStore
from ..ports.kv_cache import KeyValueCache
from ..ports.config_provider import (
    BirthdateConfig,
    ConfigProvider,
    DEFAULT_YEAR_RANGE,
    clamp_year_range,
)
from ...exceptions import ConfigurationUnavailable, MalformedCache

logger = logging.getLogger(__name__)

STORE_NAMESPACE = "hbp_birthdate"
STORE_KEY = "user_field_ids"
MIN_YEAR = 1900
ATTRIBUTE_KEY_PREFIX = "attribute:"

PARTS = ("day", "month", "year")

FIELD_MAP = {
    "day": "hbp_birth_day",
    "month": "hbp_birth_month",
    "year": "hbp_birth_year",
}

DISPLAY_NAMES = {
    "day": "Birth day",
    "month": "Birth month",
    "year": "Birth year",
}

FieldMapping = Dict[str, int]


def attribute_key(field_id: Optional[int]) -> Optional[str]:
    if field_id is None:
        return None
    return f"{ATTRIBUTE_KEY_PREFIX}{field_id}"


def day_options() -> List[str]:
    return [f"{d:02d}" for d in range(1, 32)]


def month_options() -> List[str]:
    return [f"{m:02d}" for m in range(1, 13)]


def year_options(current_year: int, range_years: Any = DEFAULT_YEAR_RANGE) -> List[str]:
    """Descending years from ``current_year`` back to the configured range, never before 1900."""
    start_year = max(MIN_YEAR, current_year - clamp_year_range(range_years))
    return [str(y) for y in range(current_year, start_year - 1, -1)]


def _coerce_field_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def reconcile_mapping(
    cached: Any,
    lookup: Callable[[str], Optional[FieldDefinition]],
) -> FieldMapping:
    """Merge a cached mapping with the authoritative field definitions.

    Anything that is not a mapping counts as an empty cache. Cached entries
    that are not usable ids are dropped, and every missing part is looked up
    by its reserved machine name. Nothing is created.
    """
    mapping: FieldMapping = {}
    if isinstance(cached, Mapping):
        for part in PARTS:
            field_id = _coerce_field_id(cached.get(part))
            if field_id is not None:
                mapping[part] = field_id

    for part, machine_name in FIELD_MAP.items():
        if part in mapping:
            continue
        field = lookup(machine_name)
        if field is not None and field.id is not None:
            mapping[part] = field.id

    return mapping


@dataclass
class FieldRegistry:
    fields: FieldDefinitionStore
    options: Optional[FieldOptionStore]
    cache: KeyValueCache
    config_provider: ConfigProvider
    today: Callable[[], date] = date.today

    def _read_cache(self) -> Any:
        try:
            return self.cache.get(STORE_NAMESPACE, STORE_KEY)
        except MalformedCache as e:
            logger.warning(f"hbp_birthdate: ignoring unreadable cached field ids: {e}")
            return None

    def resolve_mapping(self) -> FieldMapping:
        """Best known mapping; rebuilt from the field store when the cache is empty."""
        return reconcile_mapping(self._read_cache(), self.fields.find_by_name)

    def attribute_key_for(self, part: str) -> Optional[str]:
        return attribute_key(self.resolve_mapping().get(part))

    def options_for(self, part: str, config: BirthdateConfig) -> List[str]:
        if part == "day":
            return day_options()
        if part == "month":
            return month_options()
        return year_options(self.today().year, config.year_range_years)

    def ensure_fields(self) -> FieldMapping:
        """Create or update the three fields and persist their ids.

        The mapping is flushed after every part so a failure part-way leaves
        the completed parts cached. Calling it again with nothing changed
        writes nothing.
        """
        config = self.config_provider.get()
        cached = self._read_cache()
        persisted = dict(cached) if isinstance(cached, Mapping) else None
        mapping = reconcile_mapping(cached, self.fields.find_by_name)

        for part in PARTS:
            mapping[part] = self._ensure_field(mapping.get(part), part, config)
            if persisted != mapping:
                self.cache.set(STORE_NAMESPACE, STORE_KEY, dict(mapping))
                persisted = dict(mapping)

        self.set_positions(mapping["day"], mapping["month"], mapping["year"])
        return mapping

    def find_field(self, existing_id: Optional[int], machine_name: str) -> Optional[FieldDefinition]:
        # A cached id is only trusted while it still points at the expected machine name.
        if existing_id is not None:
            field = self.fields.find_by_id(existing_id)
            if field is not None and field.name == machine_name:
                return field
            logger.info(
                f"hbp_birthdate: cached id {existing_id} does not belong to {machine_name}, resolving by name"
            )
        return self.fields.find_by_name(machine_name)

    def _ensure_field(self, existing_id: Optional[int], part: str, config: BirthdateConfig) -> int:
        machine_name = FIELD_MAP[part]
        field = self.find_field(existing_id, machine_name)

        original = None
        if field is None:
            field = FieldDefinition(name=machine_name, description=DISPLAY_NAMES[part])
        else:
            original = replace(field)

        self._apply_field_settings(field, config)

        if original is None or field != original:
            field.id = self.fields.save(field)
            action = "created" if original is None else "updated"
            logger.info(f"hbp_birthdate: {action} field {machine_name} (id={field.id})")

        self.sync_options(field.id, self.options_for(part, config))
        return field.id

    def _apply_field_settings(self, field: FieldDefinition, config: BirthdateConfig) -> None:
        caps = self.fields.capabilities
        field.field_type = "dropdown"

        if caps.requirement:
            field.requirement = "on_signup"
        elif caps.required_flag:
            field.required = True

        # Never shown publicly
        if caps.show_on_profile:
            field.show_on_profile = False
        if caps.show_on_user_card:
            field.show_on_user_card = False

        if caps.show_on_signup:
            field.show_on_signup = True

        if caps.editable:
            field.editable = not config.lock_fields_after_signup

    def sync_options(self, field_id: int, desired_options: List[Any]) -> bool:
        """Replace the option list when it differs from ``desired_options``.

        Returns True when a replace happened.
        """
        if self.options is None or not self.fields.capabilities.options:
            raise ConfigurationUnavailable(
                "Cannot sync dropdown options: option storage is not available"
            )

        desired = [str(v) for v in desired_options]
        current = list(self.options.list_values(field_id))
        if current == desired:
            return False

        self.options.replace_all(field_id, desired)
        logger.info(f"hbp_birthdate: replaced {len(current)} options with {len(desired)} for field {field_id}")
        return True

    def set_positions(self, day_id: Optional[int], month_id: Optional[int], year_id: Optional[int]) -> bool:
        """Give the three fields consecutive positions, starting at the lowest one already used."""
        if not self.fields.capabilities.field_position:
            logger.debug("hbp_birthdate: field store has no position column, skipping ordering")
            return False

        ids = [day_id, month_id, year_id]
        if any(i is None for i in ids) or len(set(ids)) != 3:
            return False

        fields = {}
        for field_id in ids:
            field = self.fields.find_by_id(field_id)
            if field is None:
                logger.debug(f"hbp_birthdate: field {field_id} vanished, skipping ordering")
                return False
            fields[field_id] = field

        base = min((f.position for f in fields.values() if f.position is not None), default=0)
        for offset, field_id in enumerate(ids):
            if fields[field_id].position != base + offset:
                self.fields.set_position(field_id, base + offset)
        return True

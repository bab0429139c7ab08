import pytest

from app.application.ports.field_store import StoreCapabilities
from app.application.services.field_registry import (
    FIELD_MAP,
    FieldRegistry,
    day_options,
    month_options,
    reconcile_mapping,
    year_options,
)
from app.application.ports.config_provider import clamp_year_range
from app.exceptions import ConfigurationUnavailable, MalformedCache

from conftest import TODAY, FakeCache, FakeConfig, FakeFieldStore, FakeOptionStore


def _seed_fields(store):
    day = store.add(name="hbp_birth_day", description="Birth day")
    month = store.add(name="hbp_birth_month", description="Birth month")
    year = store.add(name="hbp_birth_year", description="Birth year")
    return {"day": day.id, "month": month.id, "year": year.id}


def test_option_lists():
    assert day_options()[0] == "01"
    assert day_options()[-1] == "31"
    assert len(day_options()) == 31
    assert month_options() == [f"{m:02d}" for m in range(1, 13)]


def test_year_options_descending_and_bounded():
    years = year_options(2024, 120)
    assert years[0] == "2024"
    assert years[-1] == "1904"
    assert len(years) == 121
    assert year_options(2024, 10)[-1] == "2014"
    # never earlier than 1900
    assert year_options(2024, 200)[-1] == "1900"


def test_year_range_clamp():
    assert clamp_year_range(500) == 200
    assert clamp_year_range(0) == 120
    assert clamp_year_range(-5) == 120
    assert clamp_year_range("abc") == 120
    assert clamp_year_range(50) == 50


def test_reconcile_treats_bad_shapes_as_empty(field_store):
    ids = _seed_fields(field_store)
    assert reconcile_mapping(None, field_store.find_by_name) == ids
    assert reconcile_mapping(["not", "a", "dict"], field_store.find_by_name) == ids
    assert reconcile_mapping({"day": "junk", "month": -1, "year": True}, field_store.find_by_name) == ids


def test_reconcile_keeps_cached_parts():
    def lookup(name):
        return None
    assert reconcile_mapping({"day": 7, "month": "8"}, lookup) == {"day": 7, "month": 8}


def test_resolve_mapping_rebuilds_from_store_without_creating(make_registry, field_store, cache):
    ids = _seed_fields(field_store)
    registry = make_registry()

    assert registry.resolve_mapping() == ids
    assert field_store.saves == []
    assert cache.writes == []


def test_resolve_mapping_empty_when_nothing_exists(make_registry):
    assert make_registry().resolve_mapping() == {}


def test_resolve_mapping_ignores_malformed_cache(make_registry, field_store):
    ids = _seed_fields(field_store)

    class BrokenCache(FakeCache):
        def get(self, namespace, key):
            raise MalformedCache("bad json")

    registry = make_registry(kv=BrokenCache())
    assert registry.resolve_mapping() == ids


def test_ensure_fields_creates_everything(make_registry, field_store, option_store, cache):
    registry = make_registry()
    mapping = registry.ensure_fields()

    assert set(mapping) == {"day", "month", "year"}
    assert cache.mapping == mapping
    for part, machine_name in FIELD_MAP.items():
        f = field_store.rows[mapping[part]]
        assert f.name == machine_name
        assert f.field_type == "dropdown"
        assert f.requirement == "on_signup"
        assert f.show_on_profile is False
        assert f.show_on_user_card is False
        assert f.show_on_signup is True
        assert f.editable is True
    assert option_store.values[mapping["day"]] == day_options()
    assert option_store.values[mapping["month"]] == month_options()
    assert option_store.values[mapping["year"]][0] == "2024"
    assert [field_store.rows[mapping[p]].position for p in ("day", "month", "year")] == [0, 1, 2]


def test_ensure_fields_is_idempotent(make_registry, field_store, option_store, cache):
    registry = make_registry()
    first = registry.ensure_fields()
    saves = len(field_store.saves)
    replacements = len(option_store.replacements)
    cache_writes = len(cache.writes)
    positions = len(field_store.position_writes)

    second = registry.ensure_fields()

    assert second == first
    assert len(field_store.saves) == saves
    assert len(option_store.replacements) == replacements
    assert len(cache.writes) == cache_writes
    assert len(field_store.position_writes) == positions


def test_ensure_fields_persists_each_part_immediately(make_registry, cache):
    registry = make_registry()
    registry.ensure_fields()
    assert [sorted(w) for w in cache.writes] == [
        ["day"],
        ["day", "month"],
        ["day", "month", "year"],
    ]


def test_cached_id_with_wrong_machine_name_is_corrected(field_store, option_store):
    ids = _seed_fields(field_store)
    other = field_store.add(name="favourite_colour", description="Colour")
    cache = FakeCache({"day": other.id, "month": ids["month"], "year": ids["year"]})
    config = FakeConfig()
    registry = FieldRegistry(field_store, option_store, cache, config, today=lambda: TODAY)

    mapping = registry.ensure_fields()

    assert mapping["day"] == ids["day"]
    assert cache.mapping["day"] == ids["day"]
    # the unrelated field is left alone
    assert field_store.rows[other.id].name == "favourite_colour"
    assert field_store.rows[other.id].field_type == "text"


def test_lock_after_signup_makes_fields_read_only(make_registry, field_store):
    mapping = make_registry(config=FakeConfig(lock_fields_after_signup=True)).ensure_fields()
    assert all(field_store.rows[i].editable is False for i in mapping.values())


def test_changed_setting_updates_existing_fields(make_registry, field_store):
    make_registry().ensure_fields()
    saves = len(field_store.saves)
    make_registry(config=FakeConfig(lock_fields_after_signup=True)).ensure_fields()
    assert len(field_store.saves) == saves + 3


def test_sync_options_noop_when_equal(make_registry, option_store):
    option_store.values[5] = ["01", "02"]
    assert make_registry().sync_options(5, ["01", "02"]) is False
    assert option_store.replacements == []


@pytest.mark.parametrize("live", [
    ["01", "03"],
    ["02", "01"],
    ["01"],
    ["01", "02", "03"],
])
def test_sync_options_replaces_on_any_difference(make_registry, option_store, live):
    option_store.values[5] = live
    assert make_registry().sync_options(5, [1, "02"]) is True
    assert option_store.values[5] == ["1", "02"]


def test_missing_option_storage_is_fatal(make_registry):
    registry = make_registry(options=None)
    with pytest.raises(ConfigurationUnavailable):
        registry.ensure_fields()


def test_option_capability_off_is_fatal(option_store):
    store = FakeFieldStore(StoreCapabilities(options=False))
    registry = FieldRegistry(store, option_store, FakeCache(), FakeConfig())
    with pytest.raises(ConfigurationUnavailable):
        registry.ensure_fields()


def test_partial_failure_keeps_completed_parts(make_registry, option_store, cache):
    class FailingOnYear(FakeOptionStore):
        def replace_all(self, field_id, values):
            if "2024" in values:
                raise RuntimeError("storage down")
            super().replace_all(field_id, values)

    registry = make_registry(options=FailingOnYear())
    with pytest.raises(RuntimeError):
        registry.ensure_fields()
    assert sorted(cache.mapping) == ["day", "month"]


def test_positions_start_from_lowest_existing(make_registry, field_store):
    ids = _seed_fields(field_store)
    field_store.rows[ids["day"]].position = 9
    field_store.rows[ids["month"]].position = 4
    registry = make_registry()

    assert registry.set_positions(ids["day"], ids["month"], ids["year"]) is True
    assert [field_store.rows[ids[p]].position for p in ("day", "month", "year")] == [4, 5, 6]


def test_positions_skipped_without_capability(option_store):
    store = FakeFieldStore(StoreCapabilities(field_position=False))
    registry = FieldRegistry(store, option_store, FakeCache(), FakeConfig())
    mapping = registry.ensure_fields()
    assert len(mapping) == 3
    assert store.position_writes == []
    assert all(f.position is None for f in store.rows.values())


def test_positions_skipped_when_a_field_is_missing(make_registry, field_store):
    ids = _seed_fields(field_store)
    registry = make_registry()
    assert registry.set_positions(ids["day"], ids["month"], 999) is False
    assert registry.set_positions(ids["day"], ids["day"], ids["year"]) is False
    assert registry.set_positions(ids["day"], None, ids["year"]) is False
    assert field_store.position_writes == []


def test_required_flag_used_when_no_requirement_column(option_store):
    store = FakeFieldStore(StoreCapabilities(requirement=False, required_flag=True, editable=False))
    mapping = FieldRegistry(store, option_store, FakeCache(), FakeConfig()).ensure_fields()
    f = store.rows[mapping["day"]]
    assert f.required is True
    assert f.requirement is None
    assert f.editable is None


def test_attribute_key_for(make_registry, field_store):
    ids = _seed_fields(field_store)
    registry = make_registry()
    assert registry.attribute_key_for("month") == f"attribute:{ids['month']}"
    assert make_registry(fields=FakeFieldStore()).attribute_key_for("month") is None

from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional

import pytest

from app.application.ports.config_provider import BirthdateConfig
from app.application.ports.field_store import FieldDefinition, StoreCapabilities
from app.application.services.field_registry import FieldRegistry


TODAY = date(2024, 6, 15)


class FakeFieldStore:
    def __init__(self, capabilities: Optional[StoreCapabilities] = None):
        self.capabilities = capabilities or StoreCapabilities()
        self.rows: Dict[int, FieldDefinition] = {}
        self._id = 1
        self.saves: List[FieldDefinition] = []
        self.position_writes: List[tuple] = []

    def add(self, **kwargs) -> FieldDefinition:
        f = FieldDefinition(id=self._id, **kwargs)
        self.rows[f.id] = f
        self._id += 1
        return replace(f)

    def find_by_id(self, field_id: int):
        f = self.rows.get(field_id)
        return replace(f) if f else None

    def find_by_name(self, name: str):
        f = next((f for f in self.rows.values() if f.name == name), None)
        return replace(f) if f else None

    def save(self, definition: FieldDefinition) -> int:
        stored = replace(definition)
        if stored.id is None:
            stored.id = self._id
            self._id += 1
        self.rows[stored.id] = stored
        self.saves.append(replace(stored))
        return stored.id

    def set_position(self, field_id: int, position: int) -> None:
        self.rows[field_id].position = position
        self.position_writes.append((field_id, position))


class FakeOptionStore:
    def __init__(self):
        self.values: Dict[int, List[str]] = {}
        self.replacements: List[int] = []

    def list_values(self, field_id: int) -> List[str]:
        return list(self.values.get(field_id, []))

    def replace_all(self, field_id: int, values: List[str]) -> None:
        self.values[field_id] = list(values)
        self.replacements.append(field_id)


class FakeCache:
    def __init__(self, initial=None):
        self.store = {}
        self.writes = []
        if initial is not None:
            self.store[("hbp_birthdate", "user_field_ids")] = initial

    def get(self, namespace: str, key: str):
        value = self.store.get((namespace, key))
        return dict(value) if isinstance(value, dict) else value

    def set(self, namespace: str, key: str, value) -> None:
        self.store[(namespace, key)] = dict(value)
        self.writes.append(dict(value))

    @property
    def mapping(self):
        return self.store.get(("hbp_birthdate", "user_field_ids"))


class FakeConfig:
    def __init__(self, **overrides):
        self.config = BirthdateConfig(**overrides)

    def get(self) -> BirthdateConfig:
        return self.config


@pytest.fixture
def field_store():
    return FakeFieldStore()


@pytest.fixture
def option_store():
    return FakeOptionStore()


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def make_registry(field_store, option_store, cache):
    def _make(config=None, fields=None, options=option_store, kv=None) -> FieldRegistry:
        return FieldRegistry(
            fields=fields or field_store,
            options=options,
            cache=kv or cache,
            config_provider=config or FakeConfig(),
            today=lambda: TODAY,
        )
    return _make


@pytest.fixture
def engine():
    from sqlalchemy.pool import StaticPool
    from sqlmodel import SQLModel, create_engine
    import app.db.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()

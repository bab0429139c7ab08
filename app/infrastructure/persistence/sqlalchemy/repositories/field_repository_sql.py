from typing import List, Optional
from datetime import datetime, timezone
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from .....db.models import UserField, UserFieldOption
from .....application.ports.field_store import (
    FieldDefinition,
    FieldDefinitionStore,
    FieldOptionStore,
    StoreCapabilities,
)
from .....exceptions import CapabilityUnsupported

FIELD_TABLE = "user_fields"
OPTION_TABLE = "user_field_options"

_FIELD_ATTRS = (
    "name",
    "description",
    "field_type",
    "requirement",
    "required",
    "show_on_profile",
    "show_on_user_card",
    "show_on_signup",
    "editable",
    "position",
)


def detect_capabilities(bind: Engine) -> StoreCapabilities:
    """Describe what the live schema supports, so the registry never touches missing columns."""
    inspector = inspect(bind)
    tables = set(inspector.get_table_names())
    field_cols = {c["name"] for c in inspector.get_columns(FIELD_TABLE)} if FIELD_TABLE in tables else set()
    option_cols = {c["name"] for c in inspector.get_columns(OPTION_TABLE)} if OPTION_TABLE in tables else set()
    return StoreCapabilities(
        options=OPTION_TABLE in tables,
        option_position="position" in option_cols,
        field_position="position" in field_cols,
        requirement="requirement" in field_cols,
        required_flag="required" in field_cols,
        show_on_profile="show_on_profile" in field_cols,
        show_on_user_card="show_on_user_card" in field_cols,
        show_on_signup="show_on_signup" in field_cols,
        editable="editable" in field_cols,
    )


class SqlFieldRepository(FieldDefinitionStore):
    def __init__(self, session: Session, capabilities: Optional[StoreCapabilities] = None):
        self.session = session
        self.capabilities = capabilities or detect_capabilities(session.get_bind())

    def _to_dto(self, f: UserField) -> FieldDefinition:
        return FieldDefinition(id=f.id, **{attr: getattr(f, attr) for attr in _FIELD_ATTRS})

    def find_by_id(self, field_id: int) -> Optional[FieldDefinition]:
        f = self.session.get(UserField, field_id)
        return self._to_dto(f) if f else None

    def find_by_name(self, name: str) -> Optional[FieldDefinition]:
        f = self.session.exec(select(UserField).where(UserField.name == name)).first()
        return self._to_dto(f) if f else None

    def save(self, definition: FieldDefinition) -> int:
        f = self.session.get(UserField, definition.id) if definition.id is not None else None
        if f is None:
            f = UserField(name=definition.name, description=definition.description)
        for attr in _FIELD_ATTRS:
            setattr(f, attr, getattr(definition, attr))
        f.updated_at = datetime.now(timezone.utc)
        self.session.add(f)
        self.session.commit()
        self.session.refresh(f)
        return f.id

    def set_position(self, field_id: int, position: int) -> None:
        if not self.capabilities.field_position:
            raise CapabilityUnsupported("user_fields.position")
        f = self.session.get(UserField, field_id)
        if not f:
            return
        f.position = position
        self.session.add(f)
        self.session.commit()


class SqlFieldOptionRepository(FieldOptionStore):
    def __init__(self, session: Session, has_position: bool = True):
        self.session = session
        self.has_position = has_position

    def list_values(self, field_id: int) -> List[str]:
        # Insertion order; the position column is not trusted for reads
        rows = self.session.exec(
            select(UserFieldOption.value)
            .where(UserFieldOption.user_field_id == field_id)
            .order_by(UserFieldOption.id)
        ).all()
        return list(rows)

    def replace_all(self, field_id: int, values: List[str]) -> None:
        existing = self.session.exec(
            select(UserFieldOption).where(UserFieldOption.user_field_id == field_id)
        ).all()
        for row in existing:
            self.session.delete(row)
        self.session.flush()
        for idx, value in enumerate(values):
            option = UserFieldOption(user_field_id=field_id, value=value)
            if self.has_position:
                option.position = idx
            self.session.add(option)
        self.session.commit()

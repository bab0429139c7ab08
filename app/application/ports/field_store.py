from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass
class FieldDefinition:
    name: str
    description: str
    field_type: str = "text"
    id: Optional[int] = None
    requirement: Optional[str] = None
    required: Optional[bool] = None
    show_on_profile: Optional[bool] = None
    show_on_user_card: Optional[bool] = None
    show_on_signup: Optional[bool] = None
    editable: Optional[bool] = None
    position: Optional[int] = None


@dataclass(frozen=True)
class StoreCapabilities:
    """Optional columns and sub-resources a field store supports.

    Deployments differ in schema, so the registry only touches what is
    declared here. ``options`` is the one capability it cannot do without.
    """

    options: bool = True
    option_position: bool = True
    field_position: bool = True
    requirement: bool = True
    required_flag: bool = False
    show_on_profile: bool = True
    show_on_user_card: bool = True
    show_on_signup: bool = True
    editable: bool = True


class FieldDefinitionStore(Protocol):
    capabilities: StoreCapabilities

    def find_by_id(self, field_id: int) -> Optional[FieldDefinition]:
        ...

    def find_by_name(self, name: str) -> Optional[FieldDefinition]:
        ...

    def save(self, definition: FieldDefinition) -> int:
        ...

    def set_position(self, field_id: int, position: int) -> None:
        ...


class FieldOptionStore(Protocol):
    def list_values(self, field_id: int) -> List[str]:
        ...

    def replace_all(self, field_id: int, values: List[str]) -> None:
        ...

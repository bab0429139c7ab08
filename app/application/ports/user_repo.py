from typing import Dict, Optional, Protocol
from datetime import datetime

class UserDto:
    def __init__(self, id: str, username: str, attributes: Dict[str, str],
                 created_at: Optional[datetime] = None):
        self.id = id
        self.username = username
        self.attributes = attributes
        self.created_at = created_at

class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def create(self, username: str, attributes: Dict[str, str]) -> UserDto:
        ...

    def set_attributes(self, user_id: str, attributes: Dict[str, str]) -> None:
        ...

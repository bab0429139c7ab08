from typing import Dict, Optional
from datetime import datetime, timezone
from sqlmodel import Session, select

from .....db.models import User, UserCustomField
from .....application.ports.user_repo import UserRepository, UserDto

class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _attributes(self, user_id: str) -> Dict[str, str]:
        rows = self.session.exec(select(UserCustomField).where(UserCustomField.user_id == user_id)).all()
        return {r.name: r.value for r in rows if r.value is not None}

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            username=user.username,
            attributes=self._attributes(user.id),
            created_at=user.created_at,
        )

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.id == user_id)).first()
        return self._to_dto(user) if user else None

    def create(self, username: str, attributes: Dict[str, str]) -> UserDto:
        user = User(username=username)
        self.session.add(user)
        self.session.flush()
        for name, value in attributes.items():
            self.session.add(UserCustomField(user_id=user.id, name=name, value=value))
        self.session.commit()
        self.session.refresh(user)
        return self._to_dto(user)

    def set_attributes(self, user_id: str, attributes: Dict[str, str]) -> None:
        user = self.session.exec(select(User).where(User.id == user_id)).first()
        if not user:
            return
        existing = {
            r.name: r
            for r in self.session.exec(select(UserCustomField).where(UserCustomField.user_id == user_id)).all()
        }
        for name, value in attributes.items():
            row = existing.get(name)
            if row is None:
                row = UserCustomField(user_id=user_id, name=name)
            row.value = value
            self.session.add(row)
        user.updated_at = datetime.now(timezone.utc)
        self.session.add(user)
        self.session.commit()

from dataclasses import dataclass
from typing import Dict, Optional
import logging

from .birthdate_validator import BirthdateValidator, ValidationResult
from ..ports.user_repo import UserRepository, UserDto
from ...exceptions import BirthdateRejected, UserNotFound

logger = logging.getLogger(__name__)


@dataclass
class ProfileService:
    user_repo: UserRepository
    validator: BirthdateValidator

    def _check(self, result: ValidationResult) -> None:
        if not result.accepted:
            raise BirthdateRejected(result.reason, result.params)

    def register_user(self, username: str, attributes: Optional[Dict[str, str]] = None) -> UserDto:
        attributes = dict(attributes or {})
        self._check(self.validator.validate_attributes(attributes, is_new_record=True))
        user = self.user_repo.create(username, attributes)
        logger.info(f"Registered user {user.id}")
        return user

    def update_attributes(self, user_id: str, attributes: Dict[str, str]) -> UserDto:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)
        merged = {**user.attributes, **attributes}
        self._check(self.validator.validate_attributes(merged, is_new_record=False))
        self.user_repo.set_attributes(user_id, attributes)
        user.attributes = merged
        return user

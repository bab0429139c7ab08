from typing import Any, Dict, Optional


class BirthdateError(Exception):
    """Base class for errors raised by the birthdate fields code"""


class ConfigurationUnavailable(BirthdateError):
    """A storage capability the registry cannot work without is missing"""


class MalformedCache(BirthdateError):
    """Cached mapping could not be decoded"""


class CalendarConstructionError(BirthdateError, ValueError):
    def __init__(self, year: int, month: int, day: int):
        super().__init__(f"Invalid calendar date: year={year} month={month} day={day}")
        self.year = year
        self.month = month
        self.day = day


class CapabilityUnsupported(BirthdateError):
    def __init__(self, capability: str):
        super().__init__(f"Storage does not support '{capability}'")
        self.capability = capability


class UserNotFound(BirthdateError):
    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class BirthdateRejected(BirthdateError):
    """Submitted birth date failed validation"""

    def __init__(self, reason: str, params: Optional[Dict[str, Any]] = None):
        super().__init__(f"Birth date rejected: {reason}")
        self.reason = reason
        self.params = params or {}

    @property
    def message_key(self) -> str:
        return f"birthdate.errors.{self.reason}"


def create_error_response(error: BirthdateRejected) -> dict:
    """Create a standardized error payload for a rejected submission"""
    return {
        "success": False,
        "data": None,
        "error": error.message_key,
        "params": error.params,
    }

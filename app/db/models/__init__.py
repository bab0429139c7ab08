# Models package (re-export feature modules for stable imports)
from .users.user import User, UserCustomField
from .fields.user_field import UserField, UserFieldOption
from .store.plugin_store import PluginStoreRow

__all__ = [
    "User",
    "UserCustomField",
    "UserField",
    "UserFieldOption",
    "PluginStoreRow",
]

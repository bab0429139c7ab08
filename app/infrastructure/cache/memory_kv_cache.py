import copy
from typing import Any, Dict, Optional, Tuple

from ...application.ports.kv_cache import KeyValueCache


class InMemoryKeyValueCache(KeyValueCache):
    def __init__(self) -> None:
        self._store: Dict[Tuple[str, str], Any] = {}

    def get(self, namespace: str, key: str) -> Optional[Any]:
        # copies, so callers cannot mutate what is stored
        return copy.deepcopy(self._store.get((namespace, key)))

    def set(self, namespace: str, key: str, value: Any) -> None:
        self._store[(namespace, key)] = copy.deepcopy(value)

from typing import Any, Optional, Protocol


class KeyValueCache(Protocol):
    def get(self, namespace: str, key: str) -> Optional[Any]:
        ...

    def set(self, namespace: str, key: str, value: Any) -> None:
        ...

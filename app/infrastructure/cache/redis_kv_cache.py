import json
from typing import Any, Optional

import redis

from ...application.ports.kv_cache import KeyValueCache
from ...exceptions import MalformedCache


class RedisKeyValueCache(KeyValueCache):
    def __init__(self, url: str, prefix: str = "kv:") -> None:
        self.client = redis.Redis.from_url(url)
        self.prefix = prefix

    def _key(self, namespace: str, key: str) -> str:
        return f"{self.prefix}{namespace}:{key}"

    def get(self, namespace: str, key: str) -> Optional[Any]:
        raw = self.client.get(self._key(namespace, key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (ValueError, TypeError) as e:
            raise MalformedCache(f"{namespace}/{key}: {e}") from e

    def set(self, namespace: str, key: str, value: Any) -> None:
        self.client.set(self._key(namespace, key), json.dumps(value))

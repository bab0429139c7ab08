import json
from typing import Any, Optional
from datetime import datetime, timezone
from sqlmodel import Session, select

from ...db.models import PluginStoreRow
from ...application.ports.kv_cache import KeyValueCache
from ...exceptions import MalformedCache


class SqlKeyValueCache(KeyValueCache):
    def __init__(self, session: Session):
        self.session = session

    def _row(self, namespace: str, key: str) -> Optional[PluginStoreRow]:
        return self.session.exec(
            select(PluginStoreRow)
            .where(PluginStoreRow.plugin_name == namespace)
            .where(PluginStoreRow.key == key)
        ).first()

    def get(self, namespace: str, key: str) -> Optional[Any]:
        row = self._row(namespace, key)
        if not row:
            return None
        try:
            return json.loads(row.value)
        except ValueError as e:
            raise MalformedCache(f"{namespace}/{key}: {e}") from e

    def set(self, namespace: str, key: str, value: Any) -> None:
        row = self._row(namespace, key)
        if row is None:
            row = PluginStoreRow(plugin_name=namespace, key=key)
        row.value = json.dumps(value)
        row.updated_at = datetime.now(timezone.utc)
        self.session.add(row)
        self.session.commit()

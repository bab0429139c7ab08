# app/db/models/store/plugin_store.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from datetime import datetime, timezone

class PluginStoreRow(SQLModel, table=True):
    __tablename__ = "plugin_store_rows"
    __table_args__ = (UniqueConstraint("plugin_name", "key"),)
    id: Optional[int] = Field(default=None, primary_key=True)
    plugin_name: str = Field(max_length=100, index=True)
    key: str = Field(max_length=100)
    value: str = Field(default="null")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# app/db/models/fields/user_field.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone

class UserField(SQLModel, table=True):
    __tablename__ = "user_fields"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, unique=True, index=True)
    description: str = Field(max_length=255)
    field_type: str = Field(default="text", max_length=20)
    requirement: Optional[str] = Field(default=None, max_length=20)
    required: Optional[bool] = Field(default=None)
    show_on_profile: Optional[bool] = Field(default=None)
    show_on_user_card: Optional[bool] = Field(default=None)
    show_on_signup: Optional[bool] = Field(default=None)
    editable: Optional[bool] = Field(default=None)
    position: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class UserFieldOption(SQLModel, table=True):
    __tablename__ = "user_field_options"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_field_id: int = Field(foreign_key="user_fields.id", index=True)
    value: str = Field(max_length=100)
    position: Optional[int] = Field(default=None)

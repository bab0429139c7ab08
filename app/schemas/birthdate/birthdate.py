# app/schemas/birthdate.py
from pydantic import BaseModel, Field
from typing import Optional

class BirthdateFieldIds(BaseModel):
    """Field ids in use, for client-side display"""
    day: Optional[int] = Field(None, ge=0)
    month: Optional[int] = Field(None, ge=0)
    year: Optional[int] = Field(None, ge=0)

class UserBirthdateInfo(BaseModel):
    user_id: str
    age: Optional[int] = None
    birthday_today: bool = False

class BirthdateSubmission(BaseModel):
    """Raw values submitted for the three birth date fields"""
    day: str = ""
    month: str = ""
    year: str = ""
    is_new_record: bool = False

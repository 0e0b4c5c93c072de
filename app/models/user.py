# app/models/user.py

from pydantic import BaseModel, Field
from typing import Optional, Union
from datetime import datetime

from .title import TitleSummary

class UserInDB(BaseModel):
    # This model represents data FROM the database.
    id: int = Field(alias="_id")
    title_id: Optional[Union[int, str]] = None
    roll_count: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)

class UserProfile(BaseModel):
    id: int
    roll_count: int
    title: Optional[TitleSummary] = None
    created_at: datetime

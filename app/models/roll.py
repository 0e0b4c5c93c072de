# app/models/roll.py

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional, Union

from .title import BoostLevel, TitleSummary

class RollRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    season: Optional[str] = None

class RollResponse(BaseModel):
    title: TitleSummary
    boost: float
    roll_count: int

class RollHistoryItem(BaseModel):
    title_id: Union[int, str]
    label: str
    chance_ratio: float
    boost: float
    roll_number: int
    created_at: datetime

class RollConfig(BaseModel):
    boost_levels: List[BoostLevel]
    prune_unreachable: bool
    fallback_on_empty: bool
    active_season: Optional[str] = None

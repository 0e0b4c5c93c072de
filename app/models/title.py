# app/models/title.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union

class CatalogEntry(BaseModel):
    # Stored documents carry `_id`; in-memory catalogs may pass `id` directly.
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Union[int, str] = Field(alias="_id")
    label: str
    # "1 in chance_ratio" -- bigger means rarer.
    chance_ratio: float
    active: bool = True
    season: Optional[str] = None

class TitleSummary(BaseModel):
    id: Union[int, str]
    label: str
    chance_ratio: float

class BoostLevel(BaseModel):
    model_config = ConfigDict(frozen=True)

    threshold: int = Field(..., gt=0)
    multiplier: float = Field(..., ge=1)

class RollOutcome(BaseModel):
    """
    Result of one roll, handed back to the caller for persistence.
    `roll_count` is the counter value after this roll.
    """
    entry: CatalogEntry
    boost: float
    roll_count: int

# app/services/catalog_service.py

import logging
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError

from ..core.config import settings
from ..models.title import CatalogEntry

logger = logging.getLogger("api_logger")

async def resolve_season(db: AsyncIOMotorDatabase, requested: Optional[str] = None) -> Optional[str]:
    """
    Picks the season a roll draws from: the caller's choice first, then the
    `active_season` config document, then DEFAULT_SEASON. None means every season.
    """
    if requested:
        return requested

    config = await db.config.find_one({"key": "active_season"})
    if config and config.get("value"):
        return config["value"]
    return settings.DEFAULT_SEASON

async def load_catalog(db: AsyncIOMotorDatabase, season: Optional[str] = None) -> List[CatalogEntry]:
    query = {"active": True}
    if season is not None:
        query["season"] = season

    # Sorted so the selector always walks titles in the same order.
    cursor = db.titles.find(query).sort("_id", 1)

    catalog = []
    async for doc in cursor:
        # Titles inserted without an explicit id get an ObjectId; expose it as its hex string.
        if isinstance(doc.get("_id"), ObjectId):
            doc["_id"] = str(doc["_id"])
        try:
            catalog.append(CatalogEntry(**doc))
        except ValidationError as e:
            logger.warning(f"Skipping malformed title document {doc.get('_id')!r}: {e.error_count()} error(s)")
    return catalog

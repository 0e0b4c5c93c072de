# app/routers/roll.py

import logging
import random
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from datetime import datetime, timezone

from ..db import get_db
from ..core.config import settings
from ..core.rate_limiter import limiter_decorator
from ..models.roll import RollRequest, RollResponse
from ..models.title import BoostLevel, TitleSummary
from ..services.catalog_service import load_catalog, resolve_season
from ..services.roll_service import NoEligibleEntries, roll
from ..services.user_service import get_or_create_user
from .dependencies import get_boost_levels, get_rng

logger = logging.getLogger("api_logger")

router = APIRouter(prefix="/roll", tags=["Roll"])

@router.post("", response_model=RollResponse)
@limiter_decorator("30/minute")
async def roll_title(
    request: Request,
    roll_request: RollRequest,
    db: AsyncIOMotorDatabase = Depends(get_db),
    rng: random.Random = Depends(get_rng),
    boost_levels: List[BoostLevel] = Depends(get_boost_levels),
):
    user = await get_or_create_user(db, roll_request.user_id)

    season = await resolve_season(db, roll_request.season)
    catalog = await load_catalog(db, season)
    if not catalog:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="No titles available")

    try:
        outcome = roll(
            catalog,
            user.roll_count,
            levels=boost_levels,
            rng=rng,
            prune_unreachable=settings.BOOST_PRUNE_UNREACHABLE,
            fallback_to_base=settings.BOOST_FALLBACK_ON_EMPTY,
        )
    except NoEligibleEntries as e:
        logger.error(f"Roll failed for user {user.id} (season={season!r}): {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="No eligible titles for this roll")

    selected = outcome.entry

    # Only succeeds if nobody else rolled for this user since we read the counter.
    result = await db.users.update_one(
        {"_id": user.id, "roll_count": user.roll_count},
        {"$set": {"title_id": selected.id}, "$inc": {"roll_count": 1}}
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Another roll is in progress, try again")

    # The counter update above has already committed; the two writes are not atomic.
    # A failed history insert is logged and the roll still stands.
    try:
        await db.roll_history.insert_one({
            "user_id": user.id,
            "title_id": selected.id,
            "label": selected.label,
            "chance_ratio": selected.chance_ratio,
            "boost": outcome.boost,
            "roll_number": outcome.roll_count,
            "created_at": datetime.now(timezone.utc)
        })
    except PyMongoError as e:
        logger.error(f"Roll {outcome.roll_count} for user {user.id} committed but history insert failed: {e}")

    if outcome.boost > 1:
        logger.info(f"Boosted roll x{outcome.boost:g} for user {user.id}: '{selected.label}' (1/{selected.chance_ratio:g})")

    return RollResponse(
        title=TitleSummary(id=selected.id, label=selected.label, chance_ratio=selected.chance_ratio),
        boost=outcome.boost,
        roll_count=outcome.roll_count
    )

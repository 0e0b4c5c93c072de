# app/routers/config.py

from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List

from ..db import get_db
from ..core.config import settings
from ..core.rate_limiter import limiter_decorator
from ..models.roll import RollConfig
from ..models.title import BoostLevel
from ..services.catalog_service import resolve_season
from .dependencies import get_boost_levels

router = APIRouter(prefix="/config", tags=["Config"])

@router.get("/roll", response_model=RollConfig)
@limiter_decorator("60/minute") # Protect this public endpoint
async def get_roll_config(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_db),
    boost_levels: List[BoostLevel] = Depends(get_boost_levels)
):
    return RollConfig(
        boost_levels=sorted(boost_levels, key=lambda level: level.threshold, reverse=True),
        prune_unreachable=settings.BOOST_PRUNE_UNREACHABLE,
        fallback_on_empty=settings.BOOST_FALLBACK_ON_EMPTY,
        active_season=await resolve_season(db)
    )

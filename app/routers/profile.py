# app/routers/profile.py

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List

from ..db import get_db
from ..models.roll import RollHistoryItem
from ..models.user import UserInDB, UserProfile
from ..services.user_service import build_profile, get_or_create_user
from ..core.rate_limiter import limiter_decorator

router = APIRouter(prefix="/profile", tags=["Profile"])

@router.get("/{user_id}", response_model=UserProfile)
@limiter_decorator("60/minute")
async def get_profile(
    request: Request,
    user_id: int = Path(..., gt=0),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Returns the user's current title, creating the user on first visit.
    """
    user = await get_or_create_user(db, user_id)
    return await build_profile(db, user)

@router.get("/{user_id}/history", response_model=List[RollHistoryItem])
@limiter_decorator("60/minute")
async def get_roll_history(
    request: Request,
    user_id: int = Path(..., gt=0),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    user_doc = await db.users.find_one({"_id": user_id})
    if not user_doc:
        raise HTTPException(status_code=404, detail="User not found")

    user = UserInDB(**user_doc)
    history_cursor = db.roll_history.find({"user_id": user.id}).sort("roll_number", -1).limit(limit)

    return [RollHistoryItem(**record) async for record in history_cursor]

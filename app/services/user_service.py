# app/services/user_service.py

from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..models.title import TitleSummary
from ..models.user import UserInDB, UserProfile

async def get_or_create_user(db: AsyncIOMotorDatabase, user_id: int) -> UserInDB:
    user_doc = await db.users.find_one({"_id": user_id})
    if user_doc is None:
        new_doc = {
            "_id": user_id,
            "title_id": None,
            "roll_count": 0,
            "created_at": datetime.now(timezone.utc),
        }
        try:
            await db.users.insert_one(new_doc)
            user_doc = new_doc
        except DuplicateKeyError:
            # Another request created the same user first.
            user_doc = await db.users.find_one({"_id": user_id})
    return UserInDB(**user_doc)

async def get_title_summary(db: AsyncIOMotorDatabase, title_id) -> Optional[TitleSummary]:
    if title_id is None:
        return None
    candidates = [title_id]
    if isinstance(title_id, str) and ObjectId.is_valid(title_id):
        candidates.append(ObjectId(title_id))
    title_doc = await db.titles.find_one({"_id": {"$in": candidates}})
    if title_doc is None:
        return None
    return TitleSummary(
        id=str(title_doc["_id"]) if isinstance(title_doc["_id"], ObjectId) else title_doc["_id"],
        label=title_doc["label"],
        chance_ratio=title_doc["chance_ratio"],
    )

async def build_profile(db: AsyncIOMotorDatabase, user: UserInDB) -> UserProfile:
    return UserProfile(
        id=user.id,
        roll_count=user.roll_count,
        title=await get_title_summary(db, user.title_id),
        created_at=user.created_at,
    )

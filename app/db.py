# app/db.py

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import IndexModel, ASCENDING, DESCENDING
from .core.config import settings

# tz_aware so roll timestamps come back as UTC-aware datetimes.
client = AsyncIOMotorClient(settings.DATABASE_URL, tz_aware=True)

db: AsyncIOMotorDatabase = client[settings.DATABASE_NAME]

INDEXES = {
    "titles": [
        IndexModel([("active", ASCENDING), ("season", ASCENDING)], name="title_active_season"),
    ],
    # One history row per (user, roll number); a lost counter race can't duplicate it.
    "roll_history": [
        IndexModel([("user_id", ASCENDING), ("roll_number", DESCENDING)], unique=True, name="user_roll_number_unique"),
        IndexModel([("created_at", DESCENDING)], name="roll_created_at"),
    ],
    "config": [
        IndexModel([("key", ASCENDING)], unique=True, name="config_key_unique"),
    ],
}

async def ensure_indexes(database: AsyncIOMotorDatabase) -> None:
    for collection, indexes in INDEXES.items():
        await database[collection].create_indexes(indexes)

async def get_db() -> AsyncIOMotorDatabase:
    return db

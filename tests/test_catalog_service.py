import logging

import pytest
from pymongo.errors import DuplicateKeyError

from app.core.config import settings
from app.db import ensure_indexes
from app.services.catalog_service import load_catalog, resolve_season
from app.services.user_service import get_or_create_user, get_title_summary


TITLES = [
    {"_id": 3, "label": "Legend", "chance_ratio": 1000, "active": True, "season": "s1"},
    {"_id": 1, "label": "Rookie", "chance_ratio": 2, "active": True, "season": "s1"},
    {"_id": 2, "label": "Veteran", "chance_ratio": 50, "active": True, "season": "s2"},
    {"_id": 4, "label": "Retired", "chance_ratio": 5, "active": False, "season": "s1"},
]


@pytest.mark.asyncio
async def test_load_catalog_filters_active_and_season(mongo):
    await mongo.titles.insert_many(TITLES)

    everything = await load_catalog(mongo)
    assert [t.id for t in everything] == [1, 2, 3]

    season_one = await load_catalog(mongo, "s1")
    assert [t.label for t in season_one] == ["Rookie", "Legend"]


@pytest.mark.asyncio
async def test_load_catalog_skips_malformed_documents(mongo, caplog):
    await mongo.titles.insert_many([
        {"_id": 1, "label": "Rookie", "chance_ratio": 2, "active": True},
        {"_id": 2, "chance_ratio": "often", "active": True},
    ])
    with caplog.at_level(logging.WARNING, logger="api_logger"):
        catalog = await load_catalog(mongo)
    assert [t.id for t in catalog] == [1]
    assert "Skipping malformed title document 2" in caplog.text


@pytest.mark.asyncio
async def test_resolve_season_precedence(mongo, monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_SEASON", "fallback")
    assert await resolve_season(mongo) == "fallback"

    await mongo.config.insert_one({"key": "active_season", "value": "winter"})
    assert await resolve_season(mongo) == "winter"
    assert await resolve_season(mongo, "summer") == "summer"


@pytest.mark.asyncio
async def test_get_or_create_user_is_idempotent(mongo):
    created = await get_or_create_user(mongo, 42)
    assert created.roll_count == 0
    assert created.title_id is None

    again = await get_or_create_user(mongo, 42)
    assert again.id == 42
    assert await mongo.users.count_documents({}) == 1


class RacingUsers:
    """Users collection where another request inserts the user between our read and insert."""

    def __init__(self, winner):
        self.winner = winner
        self.reads = 0

    async def find_one(self, query):
        self.reads += 1
        return None if self.reads == 1 else self.winner

    async def insert_one(self, doc):
        raise DuplicateKeyError("E11000 duplicate key error collection: users")


class RacingDb:
    def __init__(self, users):
        self.users = users


@pytest.mark.asyncio
async def test_get_or_create_user_rereads_after_duplicate_key():
    winner = {"_id": 42, "title_id": 7, "roll_count": 3}
    users = RacingUsers(winner)

    user = await get_or_create_user(RacingDb(users), 42)

    assert users.reads == 2
    assert user.roll_count == 3
    assert user.title_id == 7


@pytest.mark.asyncio
async def test_load_catalog_exposes_generated_ids_as_strings(mongo):
    result = await mongo.titles.insert_one({"label": "Nameless", "chance_ratio": 3, "active": True})

    catalog = await load_catalog(mongo)
    assert [t.id for t in catalog] == [str(result.inserted_id)]

    summary = await get_title_summary(mongo, catalog[0].id)
    assert summary.label == "Nameless"
    assert summary.id == str(result.inserted_id)


@pytest.mark.asyncio
async def test_history_index_rejects_duplicate_roll_numbers(mongo):
    await ensure_indexes(mongo)
    row = {"user_id": 1, "roll_number": 1, "title_id": 1}
    await mongo.roll_history.insert_one(dict(row))
    with pytest.raises(DuplicateKeyError):
        await mongo.roll_history.insert_one(dict(row))

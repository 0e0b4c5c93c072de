import asyncio
import os
import random

import pytest

os.environ.setdefault("DATABASE_URL", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "title_roll_test")

from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.db import get_db
from app.routers.dependencies import get_rng
from main import app


@pytest.fixture
def mongo():
    return AsyncMongoMockClient()["title_roll_test"]


@pytest.fixture
def seed(mongo):
    def _seed(collection, docs):
        asyncio.run(mongo[collection].insert_many(docs))
    return _seed


@pytest.fixture
def client(mongo):
    async def override_get_db():
        return mongo

    rng = random.Random(1234)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rng] = lambda: rng
    # No context manager: the lifespan hook would talk to a real MongoDB.
    yield TestClient(app)
    app.dependency_overrides.clear()

import os

import pytest
import pytest_asyncio
from fakes import FakeMotorClient
from motor.motor_asyncio import AsyncIOMotorClient

from order_transactions.store import Store

MONGO_URI = os.getenv("MONGO_URI")
TEST_DATABASE = "test_order_transactions"


@pytest.fixture
def fake_client():
    return FakeMotorClient()


@pytest.fixture
def fake_store(fake_client):
    return Store(fake_client, TEST_DATABASE)


@pytest_asyncio.fixture
async def mongo_client():
    if not MONGO_URI:
        pytest.skip("MONGO_URI is not set")
    client = AsyncIOMotorClient(MONGO_URI)
    yield client
    client.close()


@pytest_asyncio.fixture
async def mongo_store(mongo_client):
    store = Store(mongo_client, TEST_DATABASE)
    await store.reset()
    yield store
    await mongo_client.drop_database(TEST_DATABASE)

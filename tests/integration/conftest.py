"""Fixtures backed by a real MongoDB server.

Each test gets its own randomly named database, dropped afterwards. Without
ALSADER_TEST_DATABASE_URL the tests try a local server and are skipped when it
does not answer; with the variable set, an unreachable server fails them.
"""

import os
from urllib.parse import urlparse, urlunparse
from uuid import uuid4

import pytest
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from alsader.app import App
from alsader.config import Config
from alsader.core.core import Core

DATABASE_URL_ENV = "ALSADER_TEST_DATABASE_URL"
TEST_DATABASE_URL = os.environ.get(DATABASE_URL_ENV, "mongodb://localhost:27017/alsader_test")
ADMIN_PASSWORD = "admin-pass1"
USER_PASSWORD = "password1"


def mongo_required():
    return bool(os.environ.get(DATABASE_URL_ENV))


async def _ensure_mongo(database_url):
    client = AsyncMongoClient(database_url, serverSelectionTimeoutMS=1000)
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        if mongo_required():
            pytest.fail(f"MongoDB at {DATABASE_URL_ENV} is not reachable: {e}")
        pytest.skip("MongoDB is not reachable")
    finally:
        await client.aclose()


@pytest.fixture
def mongo_guard():
    return _ensure_mongo


@pytest.fixture
async def config(tmp_path):
    database_name = f"alsader_test_{uuid4().hex[:12]}"
    database_url = urlunparse(urlparse(TEST_DATABASE_URL)._replace(path=f"/{database_name}"))
    await _ensure_mongo(database_url)

    yield Config(
        database_url=database_url,
        uploads_path=str(tmp_path / "uploads"),
        admin_password=ADMIN_PASSWORD,
        allocation_max_attempts=20,
    )

    client = AsyncMongoClient(database_url)
    await client.drop_database(database_name)
    await client.aclose()


@pytest.fixture
async def core(config):
    core = Core(config)
    async with core.lifespan():
        yield core


@pytest.fixture
async def app(config):
    app = App(config)
    async with app.lifespan():
        yield app


@pytest.fixture
def admin(core):
    return core.services.user.get_user_by_username("admin")


@pytest.fixture
async def alice(core):
    return await core.services.user.create_user("alice", USER_PASSWORD, "أليس")


@pytest.fixture
async def bob(core):
    return await core.services.user.create_user("bob", USER_PASSWORD, "بوب")

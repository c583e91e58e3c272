"""Pytest configuration and fixtures for Rollcall tests.

Pure components are tested against the in-memory directories below.
Tests that need MongoDB get a unique database per test and are skipped
when no server is reachable at TEST_MONGODB_URL.
"""

import asyncio
import os
import tempfile
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import date
from functools import lru_cache
from typing import Any

# Settings are read on first use; point them at throwaway locations first
os.environ.setdefault("ROLLCALL_SECRET_KEY", "test-secret-key-" + "0" * 32)
os.environ.setdefault("ROLLCALL_STORAGE_DATA_DIR", tempfile.mkdtemp(prefix="rollcall-test-"))

import pytest
import pytest_asyncio
from beanie import init_beanie
from httpx import ASGITransport, AsyncClient
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from rollcall.database import get_document_models
from rollcall.models import User, UserRole
from rollcall.services.auth import create_access_token
from rollcall.services.import_service import DirectoryEntry, MemberData

# MongoDB connection URL for tests (can be overridden with env var)
TEST_MONGODB_URL = os.environ.get("TEST_MONGODB_URL", "mongodb://localhost:27017")


@lru_cache(maxsize=1)
def mongo_available() -> bool:
    """Check once whether a MongoDB server answers at TEST_MONGODB_URL."""
    client = MongoClient(TEST_MONGODB_URL, serverSelectionTimeoutMS=1000)
    try:
        client.admin.command("ping")
        return True
    except PyMongoError:
        return False
    finally:
        client.close()


def create_test_app():
    """Create a FastAPI app configured for testing (no database lifespan)."""
    from fastapi import FastAPI
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    from rollcall import __version__
    from rollcall.main import app as main_app
    from rollcall.main import limiter

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        yield

    test_app = FastAPI(title="Rollcall Test", version=__version__, lifespan=test_lifespan)
    test_app.state.limiter = limiter
    test_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    for route in main_app.routes:
        test_app.routes.append(route)

    return test_app


_test_app = None


def get_test_app():
    """Get the test app singleton."""
    global _test_app
    if _test_app is None:
        _test_app = create_test_app()
    return _test_app


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use the default event loop policy."""
    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture(autouse=True)
def disable_rate_limits():
    """Rate limits would make request-heavy tests order dependent."""
    from rollcall.main import limiter as app_limiter
    from rollcall.routers.import_router import limiter as import_limiter

    app_limiter.enabled = False
    import_limiter.enabled = False
    yield
    app_limiter.enabled = True
    import_limiter.enabled = True


# =============================================================================
# MongoDB
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def mongo_client():
    """Create a MongoDB client, skipping the test when no server is reachable."""
    if not mongo_available():
        pytest.skip(f"MongoDB not reachable at {TEST_MONGODB_URL}")

    client = AsyncIOMotorClient(TEST_MONGODB_URL, maxPoolSize=10, minPoolSize=1)
    yield client
    client.close()


@pytest_asyncio.fixture(scope="function")
async def init_test_db(mongo_client):
    """Initialize Beanie with a unique test database, dropped afterwards."""
    db_name = f"test_rollcall_{uuid.uuid4().hex[:8]}"
    db = mongo_client[db_name]

    await init_beanie(database=db, document_models=get_document_models())
    yield db

    await mongo_client.drop_database(db_name)


async def _create_user(email: str, name: str, role: UserRole) -> User:
    user = User(email=email, name=name, role=role)
    await user.insert()
    return user


@pytest_asyncio.fixture(scope="function")
async def leader_user(init_test_db) -> User:
    return await _create_user("leader@example.com", "Cell Leader", UserRole.CELL_LEADER)


@pytest_asyncio.fixture(scope="function")
async def admin_user(init_test_db) -> User:
    return await _create_user("admin@example.com", "Super Admin", UserRole.SUPER_ADMIN)


@asynccontextmanager
async def _client_for(email: str | None) -> AsyncGenerator[AsyncClient, None]:
    headers = {}
    if email is not None:
        headers["Authorization"] = f"Bearer {create_access_token(data={'sub': email})}"
    transport = ASGITransport(app=get_test_app())
    async with AsyncClient(transport=transport, base_url="http://test", headers=headers) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def client(leader_user) -> AsyncGenerator[AsyncClient, None]:
    """Client authenticated as a cell leader."""
    async with _client_for(leader_user.email) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def admin_client(admin_user) -> AsyncGenerator[AsyncClient, None]:
    """Client authenticated as a super admin."""
    async with _client_for(admin_user.email) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def other_leader_client(init_test_db) -> AsyncGenerator[AsyncClient, None]:
    """Client authenticated as a second cell leader."""
    user = await _create_user("other@example.com", "Other Leader", UserRole.CELL_LEADER)
    async with _client_for(user.email) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def unauthenticated_client(init_test_db) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(None) as ac:
        yield ac


# =============================================================================
# In-memory directories
# =============================================================================


class InMemoryMemberDirectory:
    """Member directory backed by a dict, recording every write."""

    def __init__(self) -> None:
        self.members: dict[str, dict[str, Any]] = {}
        self.created: list[str] = []
        self.updated: list[str] = []
        self.lookups: list[str] = []

    def add(self, **data: Any) -> str:
        member_id = f"m{len(self.members) + 1}"
        self.members[member_id] = data
        return member_id

    def _find(self, **criteria: Any) -> DirectoryEntry | None:
        for member_id, data in self.members.items():
            if all(data.get(key) == value for key, value in criteria.items()):
                return DirectoryEntry(member_id, f"{data['first_name']} {data['last_name']}")
        return None

    async def find_by_email(self, email: str) -> DirectoryEntry | None:
        self.lookups.append("email")
        return self._find(email=email)

    async def find_by_phone(self, phone: str) -> DirectoryEntry | None:
        self.lookups.append("phone")
        return self._find(phone=phone)

    async def find_by_name_and_birthday(
        self, first_name: str, last_name: str, birthday: date
    ) -> DirectoryEntry | None:
        self.lookups.append("name_birthday")
        return self._find(first_name=first_name, last_name=last_name, birthday=birthday)

    async def create(self, data: MemberData) -> str:
        member_id = self.add(**data)
        self.created.append(member_id)
        return member_id

    async def update(self, member_id: str, data: MemberData) -> None:
        if member_id not in self.members:
            raise LookupError(f"Member {member_id} no longer exists")
        self.members[member_id].update(data)
        self.updated.append(member_id)


class InMemoryGroupDirectory:
    def __init__(self, groups: dict[str, str] | None = None) -> None:
        self.groups = {name.lower(): group_id for name, group_id in (groups or {}).items()}

    async def find_id_by_name(self, name: str) -> str | None:
        return self.groups.get(name.lower())


@pytest.fixture
def member_directory() -> InMemoryMemberDirectory:
    return InMemoryMemberDirectory()


@pytest.fixture
def group_directory() -> InMemoryGroupDirectory:
    return InMemoryGroupDirectory({"Youth Group": "g1", "Young Adults": "g2"})

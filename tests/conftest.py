"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from httpx import ASGITransport, AsyncClient

from edugram.auth.jwt import create_access_token
from edugram.auth.service import register_credentials
from edugram.db.models import UserProfile
from edugram.main import create_app
from edugram.profiles.service import create_profile, save_profile
from edugram.storage.blob import BlobStorage, get_blob_storage
from edugram.store import KeyValueStore, close_redis, use_redis

MEDIA_BASE_URL = "http://test/media"


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[FakeAsyncRedis, None]:
    """In-memory Redis installed as the shared pool, flushed around each test."""
    fake = FakeAsyncRedis(decode_responses=True)
    await fake.flushall()
    use_redis(fake)
    yield fake
    await fake.flushall()
    await close_redis()


@pytest_asyncio.fixture
async def store(redis_client: FakeAsyncRedis) -> KeyValueStore:
    return KeyValueStore(redis_client)


@pytest.fixture
def blobs(tmp_path: Path) -> BlobStorage:
    return BlobStorage(tmp_path / "media", MEDIA_BASE_URL)


@pytest_asyncio.fixture
async def client(redis_client: FakeAsyncRedis, blobs: BlobStorage) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client against a fresh app."""
    app = create_app(blobs)
    app.dependency_overrides[get_blob_storage] = lambda: blobs
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def make_user(
    store: KeyValueStore,
    email: str,
    full_name: str,
    *,
    verified: bool = False,
    college: str | None = None,
    department: str | None = None,
) -> UserProfile:
    """Register credentials and a profile directly, optionally already verified."""
    user_id = await register_credentials(store, email, "Secret123")
    profile = await create_profile(store, user_id, email, full_name)
    if verified or college or department:
        profile.college_name = college
        profile.department = department
        if verified:
            profile.verified = True
            profile.verification_status = "approved"
        await save_profile(store, profile)
    return profile


def auth_headers(profile: UserProfile) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(profile.id, profile.email)}"}


@pytest_asyncio.fixture
async def alice(store: KeyValueStore) -> UserProfile:
    """Verified student at MIT."""
    return await make_user(store, "alice@mit.edu", "Alice Johnson", verified=True, college="MIT", department="CS")


@pytest_asyncio.fixture
async def bob(store: KeyValueStore) -> UserProfile:
    """Verified student at Stanford."""
    return await make_user(store, "bob@stanford.edu", "Bob Smith", verified=True, college="Stanford", department="EE")


@pytest_asyncio.fixture
async def carol(store: KeyValueStore) -> UserProfile:
    """Unverified user."""
    return await make_user(store, "carol@test.com", "Carol Danvers")

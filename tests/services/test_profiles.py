"""Profile directory and search service tests."""

from __future__ import annotations

import pytest

from edugram.db.models import UserProfile
from edugram.errors import DuplicateUser, NotFound, UpstreamFailure, ValidationError
from edugram.profiles import service as profiles
from edugram.search.service import search_users
from edugram.storage.blob import BlobStorage, Upload
from edugram.store import KeyValueStore
from tests.conftest import make_user


class TestCreateProfile:
    async def test_creates_unverified_profile(self, store: KeyValueStore):
        profile = await profiles.create_profile(store, "u1", "ada@mit.edu", "Ada Lovelace")
        assert profile.user_id.startswith("student_2025_")
        assert profile.verified is False
        assert profile.verification_status == "unset"
        assert profile.profile_completed is False
        assert (await profiles.get_profile(store, "u1")).email == "ada@mit.edu"

    async def test_duplicate_rejected(self, store: KeyValueStore):
        await profiles.create_profile(store, "u1", "ada@mit.edu", "Ada")
        with pytest.raises(DuplicateUser):
            await profiles.create_profile(store, "u1", "ada@mit.edu", "Ada")

    async def test_display_id_collision_retries(self, store: KeyValueStore, monkeypatch):
        taken = await profiles.create_profile(store, "u1", "a@mit.edu", "A")
        ids = iter([taken.user_id, taken.user_id, "student_2025_ZZZZ"])
        monkeypatch.setattr(profiles, "generate_display_id", lambda _year: next(ids))

        second = await profiles.create_profile(store, "u2", "b@mit.edu", "B")
        assert second.user_id == "student_2025_ZZZZ"

    async def test_display_id_exhaustion(self, store: KeyValueStore, monkeypatch):
        taken = await profiles.create_profile(store, "u1", "a@mit.edu", "A")
        monkeypatch.setattr(profiles, "generate_display_id", lambda _year: taken.user_id)
        with pytest.raises(UpstreamFailure):
            await profiles.create_profile(store, "u2", "b@mit.edu", "B")

    async def test_get_missing(self, store: KeyValueStore):
        with pytest.raises(NotFound):
            await profiles.get_profile(store, "ghost")


class TestFindProfile:
    async def test_by_display_id(self, store: KeyValueStore, alice: UserProfile):
        assert (await profiles.find_profile(store, alice.user_id)).id == alice.id

    async def test_by_internal_id(self, store: KeyValueStore, alice: UserProfile):
        assert (await profiles.find_profile(store, alice.id)).user_id == alice.user_id

    async def test_unknown(self, store: KeyValueStore):
        with pytest.raises(NotFound):
            await profiles.find_profile(store, "student_2025_NONE")


class TestCompleteProfile:
    async def test_completes_without_picture(self, store: KeyValueStore, blobs: BlobStorage, carol: UserProfile):
        profile = await profiles.complete_profile(store, blobs, carol.id, "Physics", "2", "hello")
        assert profile.profile_completed is True
        assert profile.profile_completed_at is not None
        assert profile.department == "Physics"
        assert profile.bio == "hello"
        assert profile.profile_picture is None

    async def test_picture_gets_permanent_url(self, store: KeyValueStore, blobs: BlobStorage, carol: UserProfile):
        upload = Upload(filename="me.png", data=b"\x89PNG...")
        profile = await profiles.complete_profile(store, blobs, carol.id, "Physics", "2", picture=upload)
        assert profile.profile_picture.startswith("http://test/media/profile-pictures/")
        name = profile.profile_picture.rsplit("/", 1)[1]
        assert (blobs.root / "profile-pictures" / name).read_bytes() == b"\x89PNG..."

    async def test_department_required(self, store: KeyValueStore, blobs: BlobStorage, carol: UserProfile):
        with pytest.raises(ValidationError):
            await profiles.complete_profile(store, blobs, carol.id, "", "2")


class TestSearch:
    async def test_matches_name_case_insensitive(self, store: KeyValueStore, alice, bob, carol):
        results = await search_users(store, "JOHN", exclude_user_id=bob.id)
        assert [p.id for p in results] == [alice.id]

    async def test_matches_display_id(self, store: KeyValueStore, alice, bob):
        suffix = alice.user_id.rsplit("_", 1)[1]
        results = await search_users(store, suffix.lower(), exclude_user_id=bob.id)
        assert alice.id in [p.id for p in results]

    async def test_excludes_caller(self, store: KeyValueStore, alice):
        assert await search_users(store, "john", exclude_user_id=alice.id) == []

    async def test_no_match(self, store: KeyValueStore, alice, bob):
        assert await search_users(store, "zzzz-nobody", exclude_user_id=bob.id) == []

    async def test_ignores_non_profile_keys(self, store: KeyValueStore, alice, bob):
        await store.set(f"user:{alice.id}:posts", {"posts": []})
        results = await search_users(store, "student", exclude_user_id="nobody")
        assert len(results) == 2

    async def test_empty_query_rejected(self, store: KeyValueStore):
        with pytest.raises(ValidationError):
            await search_users(store, "  ", exclude_user_id="u1")

    async def test_many_users(self, store: KeyValueStore):
        for i in range(5):
            await make_user(store, f"john{i}@test.com", f"John {i}")
        await make_user(store, "jane@test.com", "Jane Doe")
        results = await search_users(store, "john", exclude_user_id="nobody")
        assert len(results) == 5

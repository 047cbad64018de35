"""EdugramClient against the in-process app."""

from __future__ import annotations

import pytest
from fakeredis import FakeAsyncRedis
from httpx import ASGITransport

from edugram.client import ApiError, EdugramClient
from edugram.main import create_app
from edugram.storage.blob import BlobStorage, get_blob_storage


@pytest.fixture
def transport(redis_client: FakeAsyncRedis, blobs: BlobStorage) -> ASGITransport:
    app = create_app(blobs)
    app.dependency_overrides[get_blob_storage] = lambda: blobs
    return ASGITransport(app=app)


async def _signed_in(transport: ASGITransport, email: str, full_name: str) -> EdugramClient:
    api = EdugramClient("http://test", transport=transport, poll_interval=0.01)
    await api.signup(email, "Secret123", full_name)
    await api.signin(email, "Secret123")
    return api


async def test_signin_keeps_token(transport: ASGITransport):
    async with await _signed_in(transport, "ada@mit.edu", "Ada Lovelace") as api:
        assert api.token
        profile = await api.profile()
        assert profile["email"] == "ada@mit.edu"

        api.signout()
        with pytest.raises(ApiError) as exc_info:
            await api.profile()
        assert exc_info.value.status_code == 401


async def test_error_message_surfaces(transport: ASGITransport):
    async with EdugramClient("http://test", transport=transport) as api:
        with pytest.raises(ApiError) as exc_info:
            await api.signin("nobody@mit.edu", "Secret123")
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Invalid login credentials"


async def test_poll_messages_yields_new_messages(transport: ASGITransport):
    ada = await _signed_in(transport, "ada@mit.edu", "Ada Lovelace")
    grace = await _signed_in(transport, "grace@test.com", "Grace Hopper")
    async with ada, grace:
        grace_id = (await grace.profile())["id"]
        ada_id = (await ada.profile())["id"]
        conversation_id = await ada.start_conversation(grace_id)
        await ada.send_message(conversation_id, grace_id, "first")

        received = []
        async for message in grace.poll_messages(conversation_id):
            received.append(message["content"])
            if len(received) == 1:
                await grace.send_message(conversation_id, ada_id, "second")
            if len(received) == 2:
                break

    assert received == ["first", "second"]

"""Async HTTP client for the EduGram API.

The bearer token lives on the client instance rather than in module state,
so several sessions can coexist (e.g. two users in one test).

    async with EdugramClient("http://localhost:8000") as api:
        await api.signin("ada@mit.edu", "secret1")
        conv = await api.start_conversation(other_id)
        async for message in api.poll_messages(conv):
            print(message["content"])
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import httpx

from edugram.config import get_settings


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class EdugramClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        poll_interval: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self.poll_interval = poll_interval if poll_interval is not None else get_settings().message_poll_interval_seconds
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=10.0)

    async def __aenter__(self) -> EdugramClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:  # noqa: ANN401
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = await self._http.request(method, path, headers=headers, **kwargs)
        try:
            data: dict[str, Any] = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            raise ApiError(response.status_code, str(data.get("error", response.reason_phrase)))
        return data

    # --- Auth ---

    async def signup(self, email: str, password: str, full_name: str) -> dict[str, Any]:
        return await self._request("POST", "/auth/signup", json={"email": email, "password": password, "fullName": full_name})

    async def signin(self, email: str, password: str) -> dict[str, Any]:
        """Sign in and keep the returned token for subsequent calls."""
        data = await self._request("POST", "/auth/signin", json={"email": email, "password": password})
        self.token = data["accessToken"]
        return data

    def signout(self) -> None:
        self.token = None

    # --- Verification & profile ---

    async def submit_verification(
        self,
        full_name: str,
        dob: str,
        college_name: str,
        college_place: str,
        id_card: tuple[str, bytes],
    ) -> dict[str, Any]:
        form = {"fullName": full_name, "dob": dob, "collegeName": college_name, "collegePlace": college_place}
        return await self._request("POST", "/verification/submit", data=form, files={"idCard": id_card})

    async def verification_status(self) -> dict[str, Any] | None:
        return (await self._request("GET", "/verification/status"))["verification"]

    async def complete_profile(
        self, department: str, year: str, bio: str = "", picture: tuple[str, bytes] | None = None
    ) -> dict[str, Any]:
        files = {"profilePicture": picture} if picture else None
        data = await self._request(
            "POST", "/profile/complete", data={"department": department, "year": year, "bio": bio}, files=files
        )
        return data["profile"]

    async def profile(self) -> dict[str, Any] | None:
        return (await self._request("GET", "/profile"))["profile"]

    # --- Posts ---

    async def create_post(
        self, content: str, community_only: bool = False, image: tuple[str, bytes] | None = None
    ) -> dict[str, Any]:
        form = {"content": content, "isCollegeCommunityOnly": "true" if community_only else "false"}
        files = {"image": image} if image else None
        return (await self._request("POST", "/posts", data=form, files=files))["post"]

    async def feed(self, community_only: bool = False) -> list[dict[str, Any]]:
        params = {"collegeCommunityOnly": "true" if community_only else "false"}
        return (await self._request("GET", "/posts", params=params))["posts"]

    async def like(self, post_id: str) -> dict[str, Any]:
        return (await self._request("POST", f"/posts/{post_id}/like"))["post"]

    async def comment(self, post_id: str, content: str) -> dict[str, Any]:
        return (await self._request("POST", f"/posts/{post_id}/comment", json={"content": content}))["comment"]

    async def comments(self, post_id: str) -> list[dict[str, Any]]:
        return (await self._request("GET", f"/posts/{post_id}/comments"))["comments"]

    # --- Notifications & search ---

    async def notifications(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/notifications"))["notifications"]

    async def mark_notification_read(self, notification_id: str) -> dict[str, Any]:
        return (await self._request("POST", f"/notifications/{notification_id}/read"))["notification"]

    async def search_users(self, query: str) -> list[dict[str, Any]]:
        return (await self._request("GET", "/users/search", params={"q": query}))["users"]

    async def user(self, identifier: str) -> dict[str, Any]:
        return (await self._request("GET", f"/users/{identifier}"))["profile"]

    # --- Messaging ---

    async def start_conversation(self, recipient_id: str) -> str:
        return (await self._request("POST", "/messages/start", json={"recipientId": recipient_id}))["conversationId"]

    async def conversations(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/messages/conversations"))["conversations"]

    async def messages(self, conversation_id: str) -> list[dict[str, Any]]:
        return (await self._request("GET", f"/messages/{conversation_id}"))["messages"]

    async def send_message(self, conversation_id: str, recipient_id: str, content: str) -> dict[str, Any]:
        body = {"content": content, "recipientId": recipient_id}
        return (await self._request("POST", f"/messages/{conversation_id}", json=body))["message"]

    async def poll_messages(self, conversation_id: str) -> AsyncIterator[dict[str, Any]]:
        """Yield messages as they arrive, checking every ``poll_interval`` seconds.

        Messages already in the conversation when polling starts are yielded
        first. Runs until the consumer stops iterating.
        """
        seen: set[str] = set()
        while True:
            for message in await self.messages(conversation_id):
                if message["id"] not in seen:
                    seen.add(message["id"])
                    yield message
            await asyncio.sleep(self.poll_interval)

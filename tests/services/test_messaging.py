"""Messaging service tests."""

from __future__ import annotations

import pytest

from edugram.errors import Forbidden, NotFound, ValidationError
from edugram.messaging import service as messaging


class TestStartConversation:
    async def test_both_sides_get_summary(self, store, alice, bob):
        conv = await messaging.start_conversation(store, alice.id, bob.id)
        assert conv == messaging.conversation_id_for(alice.id, bob.id)

        [mine] = await messaging.list_conversations(store, alice.id)
        [theirs] = await messaging.list_conversations(store, bob.id)
        assert mine.other_user_id == bob.id and mine.other_user_name == "Bob Smith"
        assert theirs.other_user_id == alice.id and theirs.other_user_name == "Alice Johnson"
        assert mine.last_message == "" and mine.unread is False

    async def test_either_side_computes_same_id(self, store, alice, bob):
        assert await messaging.start_conversation(store, alice.id, bob.id) == await messaging.start_conversation(
            store, bob.id, alice.id
        )

    async def test_restart_preserves_unread(self, store, alice, bob):
        conv = await messaging.start_conversation(store, alice.id, bob.id)
        await messaging.send_message(store, conv, alice.id, bob.id, "hey")
        await messaging.start_conversation(store, bob.id, alice.id)

        [summary] = await messaging.list_conversations(store, bob.id)
        assert summary.unread is True
        assert summary.last_message == "hey"

    async def test_unknown_recipient(self, store, alice):
        with pytest.raises(NotFound):
            await messaging.start_conversation(store, alice.id, "ghost")

    async def test_self_rejected(self, store, alice):
        with pytest.raises(ValidationError):
            await messaging.start_conversation(store, alice.id, alice.id)

    async def test_missing_recipient(self, store, alice):
        with pytest.raises(ValidationError):
            await messaging.start_conversation(store, alice.id, "")


class TestSendMessage:
    async def test_round_trip(self, store, alice, bob):
        conv = await messaging.start_conversation(store, alice.id, bob.id)
        await messaging.send_message(store, conv, alice.id, bob.id, "hi")

        [message] = await messaging.list_messages(store, conv, bob.id)
        assert message.content == "hi"
        assert message.sender_id == alice.id
        assert message.recipient_id == bob.id

        [recipient_view] = await messaging.list_conversations(store, bob.id)
        assert recipient_view.unread is True
        assert recipient_view.last_message == "hi"

        [sender_view] = await messaging.list_conversations(store, alice.id)
        assert sender_view.unread is False
        assert sender_view.last_message == "hi"

    async def test_send_without_start_creates_summaries(self, store, alice, bob):
        conv = messaging.conversation_id_for(alice.id, bob.id)
        await messaging.send_message(store, conv, bob.id, alice.id, "cold open")
        [summary] = await messaging.list_conversations(store, alice.id)
        assert summary.id == conv and summary.unread is True

    async def test_messages_oldest_first(self, store, alice, bob):
        conv = await messaging.start_conversation(store, alice.id, bob.id)
        for text in ("one", "two", "three"):
            await messaging.send_message(store, conv, alice.id, bob.id, text)
        assert [m.content for m in await messaging.list_messages(store, conv, alice.id)] == ["one", "two", "three"]

    async def test_empty_content_rejected(self, store, alice, bob):
        conv = await messaging.start_conversation(store, alice.id, bob.id)
        with pytest.raises(ValidationError):
            await messaging.send_message(store, conv, alice.id, bob.id, "")

    async def test_wrong_conversation_rejected(self, store, alice, bob, carol):
        conv = await messaging.start_conversation(store, alice.id, bob.id)
        with pytest.raises(Forbidden):
            await messaging.send_message(store, conv, carol.id, bob.id, "let me in")

    async def test_conversations_sorted_by_activity(self, store, alice, bob, carol):
        with_bob = await messaging.start_conversation(store, alice.id, bob.id)
        with_carol = await messaging.start_conversation(store, alice.id, carol.id)
        await messaging.send_message(store, with_bob, bob.id, alice.id, "latest")
        assert [c.id for c in await messaging.list_conversations(store, alice.id)] == [with_bob, with_carol]


class TestReadAccess:
    async def test_non_participant_forbidden(self, store, alice, bob, carol):
        conv = await messaging.start_conversation(store, alice.id, bob.id)
        with pytest.raises(Forbidden):
            await messaging.list_messages(store, conv, carol.id)

    async def test_mark_read(self, store, alice, bob):
        conv = await messaging.start_conversation(store, alice.id, bob.id)
        await messaging.send_message(store, conv, alice.id, bob.id, "ping")
        assert (await messaging.mark_conversation_read(store, bob.id, conv)).unread is False
        [summary] = await messaging.list_conversations(store, bob.id)
        assert summary.unread is False

    async def test_mark_read_unknown(self, store, alice):
        with pytest.raises(NotFound):
            await messaging.mark_conversation_read(store, alice.id, "conv_x_y")

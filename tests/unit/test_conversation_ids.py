"""Unit tests for deterministic conversation ids."""

from edugram.messaging.service import conversation_id_for, is_participant
from edugram.posts.service import comment_preview


class TestConversationIds:
    def test_symmetric(self):
        assert conversation_id_for("aaa", "bbb") == conversation_id_for("bbb", "aaa")

    def test_sorted_format(self):
        assert conversation_id_for("zeta", "alpha") == "conv_alpha_zeta"

    def test_participants(self):
        conv = conversation_id_for("u1", "u2")
        assert is_participant(conv, "u1")
        assert is_participant(conv, "u2")

    def test_non_participant(self):
        conv = conversation_id_for("u1", "u2")
        assert not is_participant(conv, "u3")
        assert not is_participant(conv, "u")


class TestCommentPreview:
    def test_short_comment_unchanged(self):
        assert comment_preview("nice post") == "nice post"

    def test_exactly_fifty_not_truncated(self):
        text = "x" * 50
        assert comment_preview(text) == text

    def test_long_comment_truncated(self):
        assert comment_preview("y" * 60) == "y" * 50 + "..."

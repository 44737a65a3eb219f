"""Tests for board chat and unread counts."""

from datetime import datetime, timedelta, timezone

import pytest

from taskboard.errors import NotAuthorized
from taskboard.models.message import ChatReadStatus
from taskboard.models.notification import Notification
from taskboard.services import board_service, message_service


class TestMessages:

    def test_send_and_list(self, seed_data, db_session):
        board_id = seed_data["board_id"]
        message_service.send_message(seed_data["owner_id"], board_id, "morning")
        message_service.send_message(seed_data["member_id"], board_id, "<em>hi</em>")

        messages = message_service.list_messages(seed_data["member_id"], board_id)
        assert [m.content for m in messages] == ["morning", "hi"]

    def test_empty_message(self, seed_data, db_session):
        with pytest.raises(ValueError, match="cannot be empty"):
            message_service.send_message(seed_data["owner_id"], seed_data["board_id"], "  ")

    def test_outsider_cannot_read_or_send(self, seed_data, db_session):
        with pytest.raises(NotAuthorized):
            message_service.list_messages(seed_data["outsider_id"], seed_data["board_id"])
        with pytest.raises(NotAuthorized):
            message_service.send_message(seed_data["outsider_id"], seed_data["board_id"], "hi")

    def test_chat_mentions_notify(self, seed_data, db_session):
        message = message_service.send_message(
            seed_data["owner_id"], seed_data["board_id"], "@[Max Member] standup?"
        )
        notification = Notification.query.one()
        assert notification.type == "chat_mention"
        assert notification.message_id == message.id
        assert notification.user_id == seed_data["member_id"]
        assert notification.card_id is None


class TestUnreadCounts:

    def test_never_read_counts_others_messages(self, seed_data, db_session):
        board_id = seed_data["board_id"]
        message_service.send_message(seed_data["owner_id"], board_id, "one")
        message_service.send_message(seed_data["owner_id"], board_id, "two")
        message_service.send_message(seed_data["member_id"], board_id, "mine")

        assert message_service.unread_counts(seed_data["member_id"]) == {board_id: 2}
        assert message_service.unread_counts(seed_data["owner_id"]) == {board_id: 1}

    def test_mark_read_resets(self, seed_data, db_session):
        board_id = seed_data["board_id"]
        message_service.send_message(seed_data["owner_id"], board_id, "old")

        later = datetime.now(timezone.utc) + timedelta(seconds=1)
        message_service.mark_chat_read(seed_data["member_id"], board_id, now=later)
        assert message_service.unread_counts(seed_data["member_id"]) == {board_id: 0}

    def test_mark_read_upserts(self, seed_data, db_session):
        board_id = seed_data["board_id"]
        message_service.mark_chat_read(seed_data["member_id"], board_id)
        message_service.mark_chat_read(seed_data["member_id"], board_id)
        assert ChatReadStatus.query.count() == 1

    def test_messages_after_read_are_unread(self, seed_data, db_session):
        board_id = seed_data["board_id"]
        earlier = datetime.now(timezone.utc) - timedelta(minutes=5)
        message_service.mark_chat_read(seed_data["member_id"], board_id, now=earlier)
        message_service.send_message(seed_data["owner_id"], board_id, "new")

        assert message_service.unread_counts(seed_data["member_id"]) == {board_id: 1}

    def test_every_board_listed(self, seed_data, db_session):
        other = board_service.create_board(seed_data["member_id"], "Side")
        counts = message_service.unread_counts(seed_data["member_id"])
        assert counts == {seed_data["board_id"]: 0, other.id: 0}

"""Tests for board lifecycle, membership and visibility."""

import pytest

from conftest import make_user
from taskboard.errors import NotAuthenticated, NotAuthorized, NotFound
from taskboard.models.activity import Activity
from taskboard.models.board import Board
from taskboard.models.comment import Comment
from taskboard.models.kanban import KanbanCard, KanbanColumn, Label
from taskboard.models.message import Message
from taskboard.models.notification import Notification
from taskboard.services import (
    board_service,
    comment_service,
    message_service,
    ordering_service,
)


class TestCreateBoard:
    """Tests for new boards and their defaults."""

    def test_default_columns(self, seed_data, db_session):
        board = board_service.create_board(seed_data["owner_id"], "Roadmap")
        columns = board.columns.all()
        assert [(c.name, c.type, c.order) for c in columns] == [
            ("To Do", "todo", 0),
            ("In Progress", "in_progress", 1),
            ("Done", "done", 2),
        ]

    def test_default_labels(self, seed_data, db_session):
        board = board_service.create_board(seed_data["owner_id"], "Roadmap")
        labels = {lbl.name: lbl.color for lbl in board.labels.all()}
        assert labels == {
            "Bug": "#ef4444",
            "Feature": "#22c55e",
            "Enhancement": "#3b82f6",
            "Documentation": "#a855f7",
        }

    def test_creator_is_owner(self, seed_data, db_session):
        board = board_service.create_board(
            seed_data["member_id"], "Side project", description="notes"
        )
        assert board.owner_id == seed_data["member_id"]
        assert board.member_ids == []
        assert board.description == "notes"
        assert board.is_public is False

    def test_name_required(self, seed_data, db_session):
        with pytest.raises(ValueError):
            board_service.create_board(seed_data["owner_id"], "")

    def test_requires_login(self, db_session):
        with pytest.raises(NotAuthenticated):
            board_service.create_board(None, "Roadmap")


class TestListBoards:
    """Tests for the board list and its ordering."""

    def test_owned_and_member_boards(self, seed_data, db_session):
        own = board_service.create_board(seed_data["member_id"], "Mine")
        ids = [b.id for b in board_service.list_boards(seed_data["member_id"])]
        assert set(ids) == {own.id, seed_data["board_id"]}

    def test_outsider_sees_nothing(self, seed_data, db_session):
        assert board_service.list_boards(seed_data["outsider_id"]) == []

    def test_reorder_boards(self, seed_data, db_session):
        owner = seed_data["owner_id"]
        second = board_service.create_board(owner, "Second")
        third = board_service.create_board(owner, "Third")

        board_service.reorder_boards(
            owner, [third.id, seed_data["board_id"], second.id, "missing"]
        )

        ids = [b.id for b in board_service.list_boards(owner)]
        assert ids == [third.id, seed_data["board_id"], second.id]

    def test_reorder_skips_inaccessible(self, seed_data, db_session):
        board_service.reorder_boards(seed_data["outsider_id"], [seed_data["board_id"]])
        assert db_session.get(Board, seed_data["board_id"]).position is None


class TestGetAndUpdateBoard:
    """Tests for board detail and owner-only settings."""

    def test_member_can_read(self, seed_data, db_session):
        board = board_service.get_board(seed_data["member_id"], seed_data["board_id"])
        assert board.name == "Launch Plan"

    def test_outsider_cannot_read(self, seed_data, db_session):
        with pytest.raises(NotAuthorized):
            board_service.get_board(seed_data["outsider_id"], seed_data["board_id"])

    def test_missing_board(self, seed_data, db_session):
        with pytest.raises(NotFound):
            board_service.get_board(seed_data["owner_id"], "missing")

    def test_owner_updates_and_logs(self, seed_data, db_session):
        board = board_service.update_board(
            seed_data["owner_id"], seed_data["board_id"], name="Launch v2", icon="rocket"
        )
        assert board.name == "Launch v2"
        assert board.icon == "rocket"

        activity = Activity.query.filter_by(type="board_updated").one()
        assert activity.metadata_["field_changed"] == "name, icon"

    def test_member_cannot_update(self, seed_data, db_session):
        with pytest.raises(NotAuthorized):
            board_service.update_board(
                seed_data["member_id"], seed_data["board_id"], name="Mine now"
            )


class TestDeleteBoard:
    """Tests for owner-only board deletion."""

    def test_cascades_everything(self, seed_data, db_session):
        owner = seed_data["owner_id"]
        card = ordering_service.create_card(owner, seed_data["todo_id"], "Card")
        comment_service.add_comment(owner, card.id, "hi @[Max Member]")
        message_service.send_message(owner, seed_data["board_id"], "hello")

        board_service.delete_board(owner, seed_data["board_id"])

        assert db_session.get(Board, seed_data["board_id"]) is None
        assert KanbanColumn.query.count() == 0
        assert KanbanCard.query.count() == 0
        assert Label.query.count() == 0
        assert Comment.query.count() == 0
        assert Message.query.count() == 0
        assert Notification.query.count() == 0
        assert Activity.query.count() == 0

    def test_member_cannot_delete(self, seed_data, db_session):
        with pytest.raises(NotAuthorized):
            board_service.delete_board(seed_data["member_id"], seed_data["board_id"])
        assert db_session.get(Board, seed_data["board_id"]) is not None


class TestMembership:
    """Tests for adding, removing and listing members."""

    def test_add_member_by_email_case_insensitive(self, seed_data, db_session):
        user = board_service.add_member(
            seed_data["owner_id"], seed_data["board_id"], "  OSCAR@Example.com "
        )
        assert user.id == seed_data["outsider_id"]
        board = db_session.get(Board, seed_data["board_id"])
        assert board.has_access(seed_data["outsider_id"])

        activity = Activity.query.filter_by(
            type="member_added", target_user_id=seed_data["outsider_id"]
        ).one()
        assert activity.metadata_["target_user_name"] == "Oscar Outsider"

    def test_add_unknown_email(self, seed_data, db_session):
        with pytest.raises(NotFound):
            board_service.add_member(
                seed_data["owner_id"], seed_data["board_id"], "ghost@example.com"
            )

    def test_add_existing_member(self, seed_data, db_session):
        with pytest.raises(ValueError, match="already a member"):
            board_service.add_member(
                seed_data["owner_id"], seed_data["board_id"], seed_data["member_email"]
            )

    def test_owner_counts_as_member(self, seed_data, db_session):
        with pytest.raises(ValueError):
            board_service.add_member(
                seed_data["owner_id"], seed_data["board_id"], seed_data["owner_email"]
            )

    def test_only_owner_adds(self, seed_data, db_session):
        with pytest.raises(NotAuthorized):
            board_service.add_member(
                seed_data["member_id"], seed_data["board_id"], seed_data["outsider_email"]
            )

    def test_remove_member(self, seed_data, db_session):
        board_service.remove_member(
            seed_data["owner_id"], seed_data["board_id"], seed_data["member_id"]
        )
        board = db_session.get(Board, seed_data["board_id"])
        assert not board.has_access(seed_data["member_id"])
        assert Activity.query.filter_by(type="member_removed").count() == 1

    def test_list_members_owner_first(self, seed_data, db_session):
        members = board_service.list_members(
            seed_data["member_id"], seed_data["board_id"]
        )
        assert [m.id for m in members] == [seed_data["owner_id"], seed_data["member_id"]]


class TestVisibility:
    """Tests for public boards and custom column types."""

    def test_public_boards_exclude_own(self, seed_data, db_session):
        board_service.set_visibility(seed_data["owner_id"], seed_data["board_id"], True)

        found = board_service.list_public_boards(seed_data["outsider_id"])
        assert [(b.id, count) for b, count in found] == [(seed_data["board_id"], 2)]
        assert board_service.list_public_boards(seed_data["member_id"]) == []

    def test_private_boards_not_listed(self, seed_data, db_session):
        assert board_service.list_public_boards(seed_data["outsider_id"]) == []

    def test_only_owner_sets_visibility(self, seed_data, db_session):
        with pytest.raises(NotAuthorized):
            board_service.set_visibility(
                seed_data["member_id"], seed_data["board_id"], True
            )

    def test_custom_column_types(self, seed_data, db_session):
        board = board_service.set_custom_column_types(
            seed_data["owner_id"],
            seed_data["board_id"],
            [{"id": "design", "name": "Design", "color": "#ff00ff"}],
        )
        assert board.custom_type_ids() == ["design"]

    @pytest.mark.parametrize("types", [
        [{"id": "done", "name": "Done again"}],
        [{"id": "x", "name": "X"}, {"id": "x", "name": "Y"}],
        [{"id": "", "name": "Nameless"}],
    ])
    def test_invalid_custom_column_types(self, seed_data, db_session, types):
        with pytest.raises(ValueError):
            board_service.set_custom_column_types(
                seed_data["owner_id"], seed_data["board_id"], types
            )

    def test_new_user_has_no_boards(self, db_session):
        user = make_user("new@example.com", "New User")
        assert board_service.list_boards(user.id) == []

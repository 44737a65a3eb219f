"""Tests for the flask CLI commands."""

from taskboard.models.board import Board
from taskboard.models.kanban import KanbanCard
from taskboard.models.user import User


class TestSeedDemo:

    def test_creates_users_board_and_cards(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["seed-demo", "--email", "me@example.com"])

        assert result.exit_code == 0, result.output
        assert "Seed data created successfully!" in result.output

        db_session.expire_all()
        owner = User.query.filter_by(email="me@example.com").one()
        board = Board.query.filter_by(owner_id=owner.id).one()
        assert board.name == "Demo Board"
        assert len(board.members) == 1
        assert KanbanCard.query.filter_by(board_id=board.id).count() == 3

    def test_reuses_existing_users(self, app, db_session):
        runner = app.test_cli_runner()
        runner.invoke(args=["seed-demo"])
        result = runner.invoke(args=["seed-demo"])

        assert result.exit_code == 0, result.output
        assert "User already exists: demo@taskboard.local" in result.output
        assert User.query.count() == 2

    def test_cards_land_in_named_columns(self, app, db_session):
        runner = app.test_cli_runner()
        runner.invoke(args=["seed-demo"])

        board = Board.query.one()
        placed = {
            column.name: [c.title for c in KanbanCard.query.filter_by(column_id=column.id)]
            for column in board.columns
        }
        assert sorted(placed["To Do"]) == ["Collect feedback", "Write the brief"]
        assert placed["In Progress"] == ["Draft wireframes"]
        assert placed["Done"] == []


class TestSeedAdmin:

    def test_creates_admin(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["seed-admin", "--email", "root@example.com"])

        assert result.exit_code == 0, result.output
        assert "Created admin user: root@example.com" in result.output
        assert User.query.filter_by(email="root@example.com").one().is_admin is True

    def test_promotes_existing_user(self, app, db_session):
        runner = app.test_cli_runner()
        runner.invoke(args=["seed-demo", "--email", "me@example.com"])
        result = runner.invoke(args=["seed-admin", "--email", "me@example.com"])

        assert "Granted admin to existing user: me@example.com" in result.output
        db_session.expire_all()
        assert User.query.filter_by(email="me@example.com").one().is_admin is True

"""Tests for the admin area: user list, admin flag, all-boards view, deletes."""

import pytest
from conftest import login, make_user

from taskboard.errors import NotAuthenticated, NotAuthorized, NotFound
from taskboard.models.board import Board
from taskboard.models.kanban import KanbanCard
from taskboard.services import admin_service, card_service, ordering_service


@pytest.fixture
def admin(seed_data, db_session):
    user = make_user("ada@example.com", "Ada Admin")
    user.is_admin = True
    db_session.commit()
    return {"id": user.id, "email": user.email}


class TestRequireAdmin:

    def test_anonymous(self, seed_data, db_session):
        with pytest.raises(NotAuthenticated):
            admin_service.list_users(None)

    def test_regular_user(self, seed_data, db_session):
        with pytest.raises(NotAuthorized, match="Admin access required"):
            admin_service.list_users(seed_data["owner_id"])

    def test_is_admin(self, seed_data, admin, db_session):
        assert admin_service.is_admin(admin["id"]) is True
        assert admin_service.is_admin(seed_data["owner_id"]) is False
        assert admin_service.is_admin(None) is False


class TestListUsers:

    def test_stats(self, seed_data, admin, db_session):
        card = ordering_service.create_card(
            seed_data["owner_id"], seed_data["todo_id"], "Plan"
        )
        card_service.set_assignees(seed_data["owner_id"], card.id, [seed_data["member_id"]])
        db_session.commit()

        users = {u["id"]: u for u in admin_service.list_users(admin["id"])}
        assert users[seed_data["owner_id"]]["stats"] == {
            "owned_boards": 1,
            "member_boards": 0,
            "total_boards": 1,
            "created_cards": 1,
            "assigned_cards": 0,
        }
        assert users[seed_data["member_id"]]["stats"] == {
            "owned_boards": 0,
            "member_boards": 1,
            "total_boards": 1,
            "created_cards": 0,
            "assigned_cards": 1,
        }
        assert users[admin["id"]]["is_admin"] is True
        assert users[seed_data["owner_id"]]["is_admin"] is False

    def test_newest_first(self, seed_data, admin, db_session):
        emails = [u["email"] for u in admin_service.list_users(admin["id"])]
        assert emails[0] == admin["email"]
        assert emails[-1] == seed_data["owner_email"]

    def test_unnamed_user_is_unknown(self, seed_data, admin, db_session):
        make_user("nameless@example.com", None)
        users = admin_service.list_users(admin["id"])
        nameless = next(u for u in users if u["email"] == "nameless@example.com")
        assert nameless["name"] == "Unknown"


class TestSetUserAdmin:

    def test_grant_and_revoke(self, seed_data, admin, db_session):
        admin_service.set_user_admin(admin["id"], seed_data["member_id"], True)
        assert admin_service.is_admin(seed_data["member_id"]) is True

        admin_service.set_user_admin(admin["id"], seed_data["member_id"], False)
        assert admin_service.is_admin(seed_data["member_id"]) is False

    def test_cannot_revoke_self(self, seed_data, admin, db_session):
        with pytest.raises(ValueError):
            admin_service.set_user_admin(admin["id"], admin["id"], False)

    def test_missing_user(self, seed_data, admin, db_session):
        with pytest.raises(NotFound):
            admin_service.set_user_admin(admin["id"], "missing", True)

    def test_requires_boolean(self, seed_data, admin, db_session):
        with pytest.raises(ValueError):
            admin_service.set_user_admin(admin["id"], seed_data["member_id"], "yes")

    def test_regular_user_cannot_grant(self, seed_data, db_session):
        with pytest.raises(NotAuthorized):
            admin_service.set_user_admin(
                seed_data["owner_id"], seed_data["owner_id"], True
            )


class TestBoards:

    def test_list_all_boards(self, seed_data, admin, db_session):
        ordering_service.create_card(seed_data["owner_id"], seed_data["todo_id"], "A")
        ordering_service.create_card(seed_data["owner_id"], seed_data["done_id"], "B")
        db_session.commit()

        (board,) = admin_service.list_all_boards(admin["id"])
        assert board["id"] == seed_data["board_id"]
        assert board["owner"] == {
            "id": seed_data["owner_id"],
            "name": "Olivia Owner",
            "email": seed_data["owner_email"],
        }
        assert board["member_count"] == 2
        assert board["card_count"] == 2
        assert board["is_public"] is False

    def test_delete_any_board(self, seed_data, admin, db_session):
        ordering_service.create_card(seed_data["owner_id"], seed_data["todo_id"], "A")
        db_session.commit()

        admin_service.delete_board(admin["id"], seed_data["board_id"])
        db_session.commit()

        assert db_session.get(Board, seed_data["board_id"]) is None
        assert KanbanCard.query.count() == 0

    def test_delete_missing_board(self, seed_data, admin, db_session):
        with pytest.raises(NotFound):
            admin_service.delete_board(admin["id"], "missing")

    def test_owner_is_not_admin(self, seed_data, db_session):
        with pytest.raises(NotAuthorized):
            admin_service.delete_board(seed_data["owner_id"], seed_data["board_id"])


class TestAdminApi:

    def test_regular_user_is_403(self, client, seed_data):
        login(client, seed_data["owner_email"])
        assert client.get("/admin/status").get_json() == {"is_admin": False}
        resp = client.get("/admin/users")
        assert resp.status_code == 403
        assert resp.get_json() == {"error": "Admin access required"}

    def test_anonymous_is_401(self, client, seed_data):
        assert client.get("/admin/boards").status_code == 401

    def test_admin_flow(self, client, seed_data, admin):
        login(client, admin["email"])
        assert client.get("/admin/status").get_json() == {"is_admin": True}
        assert len(client.get("/admin/users").get_json()) == 4

        resp = client.put(
            f"/admin/users/{seed_data['member_id']}/admin", json={"is_admin": True}
        )
        assert resp.get_json() == {
            "success": True,
            "id": seed_data["member_id"],
            "is_admin": True,
        }

        resp = client.delete(f"/admin/boards/{seed_data['board_id']}")
        assert resp.status_code == 200
        assert client.get("/admin/boards").get_json() == []

    def test_bad_flag_is_400(self, client, seed_data, admin):
        login(client, admin["email"])
        resp = client.put(
            f"/admin/users/{seed_data['member_id']}/admin", json={"is_admin": "yes"}
        )
        assert resp.status_code == 400

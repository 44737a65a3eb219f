"""Tests for sign-up, profiles and preferences."""

import pytest
from conftest import login

from taskboard.errors import NotAuthenticated, NotFound
from taskboard.models.user import User
from taskboard.services import user_service


class TestRegisterUser:

    def test_creates_account(self, db_session):
        user = user_service.register_user(" New@Example.com ", "longenough", "New User")
        assert user.email == "new@example.com"
        assert user.name == "New User"
        assert user.password_hash != "longenough"
        assert user.is_admin is False

    def test_validation_messages(self, db_session):
        errors = user_service.registration_errors("", "short", "")
        assert errors == [
            "Email is required.",
            "Password must be at least 8 characters.",
            "Full name is required.",
        ]

    def test_duplicate_email(self, seed_data, db_session):
        with pytest.raises(ValueError, match="already exists"):
            user_service.register_user("MAX@example.com", "longenough", "Max Again")

    def test_name_is_plain_text(self, db_session):
        user = user_service.register_user("a@example.com", "longenough", "<i>Tom</i> & Jerry")
        assert user.name == "Tom & Jerry"


class TestRegisterApi:

    def test_register_logs_in(self, client, db_session):
        resp = client.post(
            "/auth/register",
            json={"email": "new@example.com", "password": "longenough", "name": "New"},
        )
        assert resp.status_code == 201
        assert resp.get_json()["email"] == "new@example.com"
        assert client.get("/auth/me").get_json()["name"] == "New"
        assert client.get("/api/boards").get_json() == []

    def test_register_errors_are_400(self, client, seed_data):
        resp = client.post(
            "/auth/register",
            json={"email": seed_data["owner_email"], "password": "x", "name": "Dup"},
        )
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "Password must be at least 8 characters."
        assert "An account with this email already exists." in body["errors"]

    def test_markup_only_name_is_400(self, client, db_session):
        resp = client.post(
            "/auth/register",
            json={"email": "x@example.com", "password": "longenough", "name": "<b></b>"},
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Full name is required."

    def test_cannot_register_while_logged_in(self, client, seed_data):
        login(client, seed_data["owner_email"])
        resp = client.post(
            "/auth/register",
            json={"email": "y@example.com", "password": "longenough", "name": "Y"},
        )
        assert resp.status_code == 400


class TestLookup:

    def test_get_user(self, seed_data, db_session):
        user = user_service.get_user(seed_data["owner_id"], seed_data["member_id"])
        assert user.email == seed_data["member_email"]

    def test_get_missing_user(self, seed_data, db_session):
        with pytest.raises(NotFound):
            user_service.get_user(seed_data["owner_id"], "missing")

    def test_get_requires_login(self, seed_data, db_session):
        with pytest.raises(NotAuthenticated):
            user_service.get_user(None, seed_data["member_id"])

    def test_get_many_skips_missing_and_keeps_order(self, seed_data, db_session):
        users = user_service.get_users(
            seed_data["owner_id"],
            [seed_data["outsider_id"], "missing", seed_data["member_id"]],
        )
        assert [u.id for u in users] == [seed_data["outsider_id"], seed_data["member_id"]]

    def test_get_many_over_http(self, client, seed_data):
        login(client, seed_data["member_email"])
        resp = client.get(f"/api/users?ids={seed_data['owner_id']},nope")
        assert [u["name"] for u in resp.get_json()] == ["Olivia Owner"]
        assert client.get("/api/users/nope").status_code == 404


class TestProfile:

    def test_update_name(self, seed_data, db_session):
        user = user_service.update_profile(seed_data["member_id"], "  Maxine  ")
        assert user.name == "Maxine"

    def test_empty_name_rejected(self, seed_data, db_session):
        with pytest.raises(ValueError):
            user_service.update_profile(seed_data["member_id"], "<b> </b>")

    def test_remove_image(self, seed_data, db_session):
        user = db_session.get(User, seed_data["member_id"])
        user.image = "https://cdn.example.com/max.png"
        db_session.commit()

        user_service.remove_profile_image(seed_data["member_id"])
        assert db_session.get(User, seed_data["member_id"]).image is None

    def test_profile_over_http(self, client, seed_data):
        assert client.patch("/api/profile", json={"name": "X"}).status_code == 401

        login(client, seed_data["member_email"])
        resp = client.patch("/api/profile", json={"name": "Max M."})
        assert resp.get_json()["name"] == "Max M."
        assert client.delete("/api/profile/image").get_json()["image"] is None


class TestPreferences:

    def test_defaults(self, seed_data, db_session):
        assert user_service.get_preferences(seed_data["member_id"]) == {
            "sidebar_collapsed": False
        }

    def test_update_merges(self, seed_data, db_session):
        user_service.update_preferences(seed_data["member_id"], sidebar_collapsed=True)
        db_session.commit()
        assert user_service.get_preferences(seed_data["member_id"]) == {
            "sidebar_collapsed": True
        }

        # None leaves the stored value alone
        user_service.update_preferences(seed_data["member_id"])
        assert user_service.get_preferences(seed_data["member_id"])["sidebar_collapsed"] is True

    def test_non_boolean_rejected(self, seed_data, db_session):
        with pytest.raises(ValueError):
            user_service.update_preferences(seed_data["member_id"], sidebar_collapsed="yes")

    def test_preferences_over_http(self, client, seed_data):
        login(client, seed_data["owner_email"])
        resp = client.put("/api/preferences", json={"sidebar_collapsed": True})
        assert resp.get_json() == {"sidebar_collapsed": True}
        assert client.get("/api/preferences").get_json() == {"sidebar_collapsed": True}

        login(client, seed_data["member_email"])
        assert client.get("/api/preferences").get_json() == {"sidebar_collapsed": False}

"""Shared test fixtures for the taskboard test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, CSRF off)
- client: Flask test client
- db_session: clean database per test (tables created/dropped)
- seed_data: owner, member and outsider users plus one board with the
  default columns and labels
"""

import pytest
from werkzeug.security import generate_password_hash

from taskboard import create_app
from taskboard.extensions import db as _db
from taskboard.models.user import User
from taskboard.services import board_service

PASSWORD = "password123"


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


def make_user(email, name):
    user = User(
        email=email,
        password_hash=generate_password_hash(PASSWORD),
        name=name,
    )
    _db.session.add(user)
    _db.session.flush()
    return user


def login(client, email, password=PASSWORD):
    """Log the test client in through the auth endpoint."""
    return client.post("/auth/login", json={"email": email, "password": password})


@pytest.fixture
def seed_data(app, db_session):
    """Seed an owner, a member, an outsider and one shared board.

    Returns a dict of plain ids (and the board's column ids by name) so
    tests do not depend on objects staying attached to the session.
    """
    owner = make_user("olivia@example.com", "Olivia Owner")
    member = make_user("max@example.com", "Max Member")
    outsider = make_user("oscar@example.com", "Oscar Outsider")

    board = board_service.create_board(owner.id, "Launch Plan")
    board_service.add_member(owner.id, board.id, member.email)
    _db.session.commit()

    columns = {c.name: c.id for c in board.columns.all()}
    labels = {lbl.name: lbl.id for lbl in board.labels.all()}

    return {
        "owner_id": owner.id,
        "owner_email": owner.email,
        "member_id": member.id,
        "member_email": member.email,
        "outsider_id": outsider.id,
        "outsider_email": outsider.email,
        "board_id": board.id,
        "todo_id": columns["To Do"],
        "in_progress_id": columns["In Progress"],
        "done_id": columns["Done"],
        "labels": labels,
    }

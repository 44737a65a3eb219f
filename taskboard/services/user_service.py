"""User service — sign-up, profile and per-user preferences.

Functions flush but do NOT commit — the caller commits.
"""

import logging

from werkzeug.security import generate_password_hash

from taskboard.errors import NotFound
from taskboard.extensions import db
from taskboard.models.user import User
from taskboard.services.access import require_auth
from taskboard.services.sanitize import clean_text

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def registration_errors(email, password, name):
    """Return a list of human-readable problems with a sign-up form."""
    errors = []

    if not email:
        errors.append("Email is required.")
    if not password:
        errors.append("Password is required.")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )
    if not name:
        errors.append("Full name is required.")

    if email and User.query.filter(db.func.lower(User.email) == email).first():
        errors.append("An account with this email already exists.")

    return errors


def register_user(email, password, name):
    """Create an account.

    Args:
        email: Login email. Lower-cased and stripped before storage.
        password: Plain-text password; only its hash is kept.
        name: Display name. HTML is stripped.

    Returns:
        The new User.

    Raises:
        ValueError: With the first validation problem, if any.
    """
    email = (email or "").lower().strip()
    name = clean_text(name or "")
    errors = registration_errors(email, password, name)
    if errors:
        raise ValueError(errors[0])

    user = User(
        email=email,
        password_hash=generate_password_hash(password),
        name=name,
    )
    db.session.add(user)
    db.session.flush()

    logger.info(f"User registered: {email}")
    return user


def get_user(actor_id, user_id):
    require_auth(actor_id)
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def get_users(actor_id, user_ids):
    """Users for the given ids, in request order. Unknown ids are skipped."""
    require_auth(actor_id)
    if not user_ids:
        return []
    found = {u.id: u for u in User.query.filter(User.id.in_(user_ids)).all()}
    return [found[uid] for uid in dict.fromkeys(user_ids) if uid in found]


def update_profile(actor_id, name):
    user = get_user(actor_id, actor_id)
    name = clean_text(name or "")
    if not name:
        raise ValueError("Name cannot be empty.")
    user.name = name
    db.session.flush()
    return user


def remove_profile_image(actor_id):
    user = get_user(actor_id, actor_id)
    user.image = None
    db.session.flush()
    return user


def get_preferences(actor_id):
    """Stored preferences over the defaults."""
    user = get_user(actor_id, actor_id)
    return {**User.DEFAULT_PREFERENCES, **(user.preferences or {})}


def update_preferences(actor_id, sidebar_collapsed=None):
    """Merge the given preferences into the stored ones.

    Arguments left as None keep their current value.

    Raises:
        ValueError: If sidebar_collapsed is not a boolean.
    """
    user = get_user(actor_id, actor_id)
    preferences = {**User.DEFAULT_PREFERENCES, **(user.preferences or {})}

    if sidebar_collapsed is not None:
        if not isinstance(sidebar_collapsed, bool):
            raise ValueError("sidebar_collapsed must be true or false.")
        preferences["sidebar_collapsed"] = sidebar_collapsed

    # Reassign so SQLAlchemy sees the JSON change.
    user.preferences = preferences
    db.session.flush()
    return preferences

"""User model.

Stores credentials and the profile fields shown next to cards, comments
and chat messages. Flask-Login integration via UserMixin.
"""

import uuid
from datetime import datetime, timezone

from flask_login import UserMixin

from taskboard.extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    DEFAULT_PREFERENCES = {"sidebar_collapsed": False}

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255))
    image = db.Column(db.String(1024), nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    is_admin = db.Column(db.Boolean, default=False)
    preferences = db.Column(db.JSON, default=dict)  # {"sidebar_collapsed": bool}
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=db.func.now(),
    )

    # --- Relationships ---
    owned_boards = db.relationship(
        "Board", back_populates="owner", lazy="dynamic"
    )
    activities = db.relationship(
        "Activity",
        foreign_keys="Activity.user_id",
        back_populates="user",
        lazy="dynamic",
    )

    @property
    def display_name(self):
        return self.name or self.email

    def to_summary(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "image": self.image,
        }

    def __repr__(self):
        return f"<User {self.email}>"

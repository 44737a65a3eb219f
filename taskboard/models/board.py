"""Board models.

- Board: top-level container, owned by one user and shared with members.
- board_members: join table linking member users to boards. The owner is
  not stored here.
"""

import uuid
from datetime import datetime, timezone

from taskboard.extensions import db


board_members = db.Table(
    "board_members",
    db.Column(
        "board_id",
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "user_id",
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Board(db.Model):
    __tablename__ = "boards"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    icon = db.Column(db.String(64), nullable=True)
    owner_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    is_public = db.Column(db.Boolean, default=False, index=True)
    # [{"id": "...", "name": "...", "color": "#..."}]
    custom_column_types = db.Column(db.JSON, default=list)
    position = db.Column(db.Integer, nullable=True)  # order among a user's boards
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=db.func.now(),
    )

    # --- Relationships ---
    owner = db.relationship("User", back_populates="owned_boards")
    members = db.relationship("User", secondary=board_members, lazy="selectin")
    columns = db.relationship(
        "KanbanColumn",
        back_populates="board",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="KanbanColumn.order",
    )
    labels = db.relationship(
        "Label",
        back_populates="board",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    @property
    def member_ids(self):
        return [m.id for m in self.members]

    def is_owner(self, user_id):
        return self.owner_id == user_id

    def has_access(self, user_id):
        """Owner or member."""
        return user_id is not None and (
            self.owner_id == user_id or user_id in self.member_ids
        )

    def custom_type_ids(self):
        return [t.get("id") for t in (self.custom_column_types or [])]

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "owner_id": self.owner_id,
            "member_ids": self.member_ids,
            "is_public": bool(self.is_public),
            "custom_column_types": self.custom_column_types or [],
            "position": self.position,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Board {self.name}>"

"""Activity model.

Append-only record of board mutations (card moves, assignments, label
changes, membership changes) rendered as the board and card activity feeds.
"""

import uuid
from datetime import datetime, timezone

from taskboard.extensions import db


class Activity(db.Model):
    __tablename__ = "activities"

    TYPES = (
        "card_created",
        "card_moved",
        "card_updated",
        "card_deleted",
        "card_assigned",
        "card_unassigned",
        "label_added",
        "label_removed",
        "column_created",
        "column_deleted",
        "member_added",
        "member_removed",
        "comment_added",
        "board_updated",
    )

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False
    )
    type = db.Column(db.String(32), nullable=False)
    # No FKs on the card/column/label ids: the feed outlives deleted rows.
    card_id = db.Column(db.String(36), nullable=True, index=True)
    column_id = db.Column(db.String(36), nullable=True)
    target_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    label_id = db.Column(db.String(36), nullable=True)
    metadata_ = db.Column(
        "metadata", db.JSON, default=dict
    )  # card_title, from/to column names, etc. Named metadata_ to avoid the declarative clash
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=db.func.now(),
    )

    __table_args__ = (
        db.Index("ix_activities_board_created", "board_id", "created_at"),
    )

    # --- Relationships ---
    user = db.relationship(
        "User", foreign_keys=[user_id], back_populates="activities"
    )
    target_user = db.relationship("User", foreign_keys=[target_user_id])

    def to_dict(self):
        return {
            "id": self.id,
            "board_id": self.board_id,
            "type": self.type,
            "card_id": self.card_id,
            "column_id": self.column_id,
            "label_id": self.label_id,
            "metadata": self.metadata_ or {},
            "user": self.user.to_summary() if self.user else None,
            "target_user": self.target_user.to_summary() if self.target_user else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Activity {self.type}>"

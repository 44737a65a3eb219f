"""Card comment model."""

import uuid
from datetime import datetime, timezone

from taskboard.extensions import db


class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    card_id = db.Column(
        db.String(36),
        db.ForeignKey("kanban_cards.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False
    )
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __table_args__ = (
        db.Index("ix_comments_card_created", "card_id", "created_at"),
    )

    card = db.relationship(
        "KanbanCard",
        backref=db.backref(
            "comments", lazy="dynamic", cascade="all, delete-orphan"
        ),
    )
    user = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "card_id": self.card_id,
            "user_id": self.user_id,
            "content": self.content,
            "user": self.user.to_summary() if self.user else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Comment card={self.card_id}>"

"""Notification model.

One row per recipient. Created by mention fan-out (comments, chat), card
assignment and join requests; read by the recipient only.
"""

import uuid
from datetime import datetime, timezone

from taskboard.extensions import db


class Notification(db.Model):
    __tablename__ = "notifications"

    TYPES = ("mention", "chat_mention", "assignment", "join_request")

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False
    )
    type = db.Column(db.String(32), nullable=False)
    from_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    card_id = db.Column(
        db.String(36),
        db.ForeignKey("kanban_cards.id", ondelete="CASCADE"),
        nullable=True,
    )
    comment_id = db.Column(
        db.String(36),
        db.ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
    )
    message_id = db.Column(
        db.String(36),
        db.ForeignKey("messages.id", ondelete="CASCADE"),
        nullable=True,
    )
    join_request_id = db.Column(
        db.String(36),
        db.ForeignKey("join_requests.id", ondelete="CASCADE"),
        nullable=True,
    )
    read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=db.func.now(),
    )

    __table_args__ = (
        db.Index("ix_notifications_user_created", "user_id", "created_at"),
        db.Index("ix_notifications_user_read", "user_id", "read"),
    )

    from_user = db.relationship("User", foreign_keys=[from_user_id])
    board = db.relationship("Board")
    card = db.relationship("KanbanCard")

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.type,
            "read": bool(self.read),
            "from_user": self.from_user.to_summary() if self.from_user else None,
            "board": {"id": self.board.id, "name": self.board.name} if self.board else None,
            "card": {"id": self.card.id, "title": self.card.title} if self.card else None,
            "comment_id": self.comment_id,
            "message_id": self.message_id,
            "join_request_id": self.join_request_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Notification {self.type} user={self.user_id}>"

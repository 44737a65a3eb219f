"""Board chat models.

- Message: one chat line posted to a board.
- ChatReadStatus: per (board, user) high-water mark used for unread counts.
"""

import uuid
from datetime import datetime, timezone

from taskboard.extensions import db


class Message(db.Model):
    __tablename__ = "messages"

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
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=db.func.now(),
    )

    __table_args__ = (
        db.Index("ix_messages_board_created", "board_id", "created_at"),
    )

    user = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "board_id": self.board_id,
            "user_id": self.user_id,
            "content": self.content,
            "user": self.user.to_summary() if self.user else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Message board={self.board_id}>"


class ChatReadStatus(db.Model):
    __tablename__ = "chat_read_status"

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
    last_read_at = db.Column(db.DateTime(timezone=True), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("board_id", "user_id", name="uq_chat_read_board_user"),
    )

    def __repr__(self):
        return f"<ChatReadStatus board={self.board_id} user={self.user_id}>"

"""Join request model.

A user asking to become a member of a public board. The board owner
accepts or rejects; the requester may cancel while it is pending.
"""

import uuid
from datetime import datetime, timezone

from taskboard.extensions import db


class JoinRequest(db.Model):
    __tablename__ = "join_requests"

    STATUSES = ("pending", "accepted", "rejected")

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    status = db.Column(db.String(16), nullable=False, default="pending")
    message = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=db.func.now(),
    )
    resolved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        db.Index("ix_join_requests_board_status", "board_id", "status"),
    )

    board = db.relationship("Board")
    user = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "board_id": self.board_id,
            "user": self.user.to_summary() if self.user else None,
            "board": {"id": self.board.id, "name": self.board.name} if self.board else None,
            "status": self.status,
            "message": self.message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
        }

    def __repr__(self):
        return f"<JoinRequest {self.status} board={self.board_id}>"

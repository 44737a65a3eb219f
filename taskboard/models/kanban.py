"""Kanban board models.

Provides columns (lanes), cards and labels. A card belongs to exactly one
column at a time; its `order` is its zero-based position in that column.
Cards keep a denormalized board_id so board-wide queries skip the join.
"""

import uuid
from datetime import datetime, timezone

from taskboard.extensions import db


card_assignees = db.Table(
    "card_assignees",
    db.Column(
        "card_id",
        db.String(36),
        db.ForeignKey("kanban_cards.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "user_id",
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

card_labels = db.Table(
    "card_labels",
    db.Column(
        "card_id",
        db.String(36),
        db.ForeignKey("kanban_cards.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "label_id",
        db.String(36),
        db.ForeignKey("labels.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class KanbanColumn(db.Model):
    __tablename__ = "kanban_columns"

    TYPES = (
        "backlog",
        "todo",
        "in_progress",
        "review",
        "blocked",
        "done",
        "wont_do",
    )

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(64), nullable=True)  # TYPES or a board custom type id
    order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    board = db.relationship("Board", back_populates="columns")
    cards = db.relationship(
        "KanbanCard",
        back_populates="column",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="KanbanCard.order",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "board_id": self.board_id,
            "name": self.name,
            "type": self.type,
            "order": self.order,
        }

    def __repr__(self):
        return f"<KanbanColumn {self.name}>"


class KanbanCard(db.Model):
    __tablename__ = "kanban_cards"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    column_id = db.Column(
        db.String(36),
        db.ForeignKey("kanban_columns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text, nullable=True)
    due_date = db.Column(db.DateTime(timezone=True), nullable=True)
    color = db.Column(db.String(32), nullable=True)
    story_points = db.Column(db.Integer, nullable=True)
    time_estimate = db.Column(db.Integer, nullable=True)  # minutes
    time_spent = db.Column(db.Integer, nullable=True)  # minutes
    order = db.Column(db.Integer, nullable=False, default=0)
    created_by = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=db.func.now(),
    )

    column = db.relationship("KanbanColumn", back_populates="cards")
    creator = db.relationship("User", foreign_keys=[created_by])
    assignees = db.relationship("User", secondary=card_assignees, lazy="selectin")
    labels = db.relationship(
        "Label", secondary=card_labels, back_populates="cards", lazy="selectin"
    )

    @property
    def assignee_ids(self):
        return [u.id for u in self.assignees]

    @property
    def label_ids(self):
        return [lbl.id for lbl in self.labels]

    def to_dict(self):
        return {
            "id": self.id,
            "column_id": self.column_id,
            "board_id": self.board_id,
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "color": self.color,
            "story_points": self.story_points,
            "time_estimate": self.time_estimate,
            "time_spent": self.time_spent,
            "order": self.order,
            "assignee_ids": self.assignee_ids,
            "label_ids": self.label_ids,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<KanbanCard {self.title[:40]}>"


class Label(db.Model):
    __tablename__ = "labels"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    color = db.Column(db.String(32), nullable=False)

    board = db.relationship("Board", back_populates="labels")
    cards = db.relationship(
        "KanbanCard", secondary=card_labels, back_populates="labels"
    )

    def to_dict(self):
        return {
            "id": self.id,
            "board_id": self.board_id,
            "name": self.name,
            "color": self.color,
        }

    def __repr__(self):
        return f"<Label {self.name}>"

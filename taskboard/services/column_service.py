"""Column service — create, rename, type, delete, reorder.

Functions flush but do NOT commit — the caller commits.
"""

from taskboard.extensions import db
from taskboard.models.kanban import KanbanCard, KanbanColumn
from taskboard.models.notification import Notification
from taskboard.services import activity_service
from taskboard.services.access import require_board_access, require_column_access
from taskboard.services.sanitize import clean_text

# (column type, keywords), first match wins
_TYPE_KEYWORDS = [
    ("backlog", ("backlog", "icebox")),
    ("todo", ("to do", "todo", "to-do")),
    ("in_progress", ("in progress", "doing", "working")),
    ("review", ("review", "testing", "qa")),
    ("blocked", ("blocked", "on hold")),
    ("done", ("done", "complete", "finished")),
    ("wont_do", ("won't do", "wont do", "cancel", "rejected")),
]


def suggest_column_type(name):
    """Guess a workflow type from a column name, or None."""
    lower = (name or "").lower()
    for column_type, keywords in _TYPE_KEYWORDS:
        if any(k in lower for k in keywords):
            return column_type
    return None


def list_columns(actor_id, board_id):
    require_board_access(actor_id, board_id)
    return (
        KanbanColumn.query
        .filter_by(board_id=board_id)
        .order_by(KanbanColumn.order)
        .all()
    )


def create_column(actor_id, board_id, name):
    """Append a column to the board with an auto-suggested type."""
    board = require_board_access(actor_id, board_id)
    name = clean_text(name)
    if not name:
        raise ValueError("Column name is required.")

    max_order = (
        db.session.query(db.func.max(KanbanColumn.order))
        .filter_by(board_id=board.id)
        .scalar()
    )
    max_order = max_order if max_order is not None else -1

    column = KanbanColumn(
        board_id=board.id,
        name=name,
        order=max_order + 1,
        type=suggest_column_type(name),
    )
    db.session.add(column)
    db.session.flush()

    activity_service.log(
        board_id=board.id,
        user_id=actor_id,
        type="column_created",
        column_id=column.id,
        metadata={"column_name": name},
    )
    return column


def rename_column(actor_id, column_id, name):
    column, _board = require_column_access(actor_id, column_id)
    name = clean_text(name)
    if not name:
        raise ValueError("Column name is required.")
    column.name = name
    db.session.flush()
    return column


def set_column_type(actor_id, column_id, column_type):
    """Set a built-in type, one of the board's custom type ids, or None.

    Raises:
        ValueError: If the type is neither built-in nor defined on the board.
    """
    column, board = require_column_access(actor_id, column_id)
    if column_type is not None and column_type not in KanbanColumn.TYPES \
            and column_type not in board.custom_type_ids():
        raise ValueError(f"Invalid column type '{column_type}'.")
    column.type = column_type
    db.session.flush()
    return column


def delete_column(actor_id, column_id):
    """Delete a column and every card in it.

    Remaining columns keep their orders.
    """
    column, board = require_column_access(actor_id, column_id)

    activity_service.log(
        board_id=board.id,
        user_id=actor_id,
        type="column_deleted",
        metadata={"column_name": column.name},
    )

    cards = KanbanCard.query.filter_by(column_id=column.id).all()
    card_ids = [c.id for c in cards]
    if card_ids:
        Notification.query.filter(Notification.card_id.in_(card_ids)).delete(
            synchronize_session=False
        )
    for card in cards:
        for comment in card.comments:
            db.session.delete(comment)
        db.session.delete(card)
    db.session.delete(column)
    db.session.flush()


def reorder_columns(actor_id, board_id, column_ids):
    """Set each listed column's order to its index. Foreign ids are skipped."""
    board = require_board_access(actor_id, board_id)
    for i, column_id in enumerate(column_ids):
        column = db.session.get(KanbanColumn, column_id)
        if column is not None and column.board_id == board.id:
            column.order = i
    db.session.flush()

"""Ordering service — card create / move / delete.

Each column's cards carry a zero-based `order`. Create appends after the
current maximum, move renumbers the destination column (and the source
column when the card changes columns), delete removes the card without
touching its siblings.

There is no version check between reading a column and writing the new
orders: two moves into the same column at the same time can interleave
and leave duplicate or skipped orders. Readers sort by `order` and do not
depend on the sequence being gap-free.

Functions flush but do NOT commit — the caller commits.
"""

import logging

from taskboard.extensions import db
from taskboard.models.kanban import KanbanCard, KanbanColumn
from taskboard.models.notification import Notification
from taskboard.errors import NotFound
from taskboard.services import activity_service
from taskboard.services.access import require_card_access, require_column_access
from taskboard.services.sanitize import clean_text

logger = logging.getLogger(__name__)


def _column_cards(column_id, exclude_id=None):
    query = KanbanCard.query.filter(KanbanCard.column_id == column_id)
    if exclude_id is not None:
        query = query.filter(KanbanCard.id != exclude_id)
    return query.order_by(KanbanCard.order, KanbanCard.created_at).all()


def create_card(actor_id, column_id, title, description=None):
    """Append a new card to the end of a column.

    Args:
        actor_id: Acting user's id, or None when not logged in.
        column_id: Target column id.
        title: Card title (will be sanitized).
        description: Optional description (will be sanitized).

    Returns:
        The created KanbanCard.

    Raises:
        NotAuthenticated, NotFound, NotAuthorized: Access preconditions.
        ValueError: If the title is empty.
    """
    column, board = require_column_access(actor_id, column_id)

    title = clean_text(title)
    if not title:
        raise ValueError("Title is required.")
    description = clean_text(description)

    max_order = max((c.order for c in _column_cards(column.id)), default=-1)

    card = KanbanCard(
        column_id=column.id,
        board_id=column.board_id,
        title=title,
        description=description or None,
        order=max_order + 1,
        created_by=actor_id,
    )
    db.session.add(card)
    db.session.flush()

    activity_service.log(
        board_id=board.id,
        user_id=actor_id,
        type="card_created",
        card_id=card.id,
        column_id=column.id,
        metadata={"card_title": title, "column_name": column.name},
    )
    return card


def move_card(actor_id, card_id, target_column_id, new_index):
    """Move a card to position `new_index` of `target_column_id`.

    The index is not bounds-checked: anything past the end appends, and
    anything below zero inserts at the start.

    Raises:
        NotAuthenticated, NotFound, NotAuthorized: Access preconditions.
        ValueError: If the index is not an integer, or the target column
            is on a different board.
    """
    card, board = require_card_access(actor_id, card_id)
    if not isinstance(new_index, int) or isinstance(new_index, bool):
        raise ValueError("index must be an integer.")

    target_column = db.session.get(KanbanColumn, target_column_id)
    if target_column is None:
        raise NotFound("Column not found")
    if target_column.board_id != card.board_id:
        raise ValueError("Cards can only be moved within their own board.")

    source_column_id = card.column_id
    source_column = db.session.get(KanbanColumn, source_column_id)

    sequence = _column_cards(target_column.id, exclude_id=card.id)
    sequence.insert(max(new_index, 0), card)

    for i, other in enumerate(sequence):
        if other.id == card.id:
            card.column_id = target_column.id
            card.order = i
        elif other.order != i:
            other.order = i
    db.session.flush()

    if source_column_id == target_column.id:
        return

    remaining = _column_cards(source_column_id, exclude_id=card.id)
    for i, other in enumerate(remaining):
        if other.order != i:
            other.order = i
    db.session.flush()

    activity_service.log(
        board_id=card.board_id,
        user_id=actor_id,
        type="card_moved",
        card_id=card.id,
        column_id=target_column.id,
        metadata={
            "card_title": card.title,
            "from_column_name": source_column.name if source_column else None,
            "to_column_name": target_column.name,
        },
    )
    logger.info(
        f"Card {card.id} moved from column {source_column_id} "
        f"to {target_column.id} at {card.order}"
    )


def delete_card(actor_id, card_id):
    """Delete a card with its comments and the notifications pointing at it.

    Sibling cards keep their orders, so the column may have a gap until
    the next move into or out of it.
    """
    card, board = require_card_access(actor_id, card_id)

    activity_service.log(
        board_id=board.id,
        user_id=actor_id,
        type="card_deleted",
        column_id=card.column_id,
        metadata={"card_title": card.title},
    )

    Notification.query.filter_by(card_id=card.id).delete(
        synchronize_session=False
    )
    for comment in card.comments:
        db.session.delete(comment)
    db.session.delete(card)
    db.session.flush()

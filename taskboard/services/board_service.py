"""Board service — board lifecycle, membership and visibility.

New boards get three default columns and four default labels. Owner-only
operations: settings, delete, membership, visibility, custom column types.

Functions flush but do NOT commit — the caller commits.
"""

import logging

from taskboard.errors import NotFound
from taskboard.extensions import db
from taskboard.models.activity import Activity
from taskboard.models.board import Board, board_members
from taskboard.models.comment import Comment
from taskboard.models.join_request import JoinRequest
from taskboard.models.kanban import KanbanCard, KanbanColumn, Label
from taskboard.models.message import ChatReadStatus, Message
from taskboard.models.notification import Notification
from taskboard.models.user import User
from taskboard.services import activity_service
from taskboard.services.access import (
    require_auth,
    require_board_access,
    require_board_owner,
)
from taskboard.services.sanitize import clean_text

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = [
    ("To Do", "todo"),
    ("In Progress", "in_progress"),
    ("Done", "done"),
]

DEFAULT_LABELS = [
    ("Bug", "#ef4444"),
    ("Feature", "#22c55e"),
    ("Enhancement", "#3b82f6"),
    ("Documentation", "#a855f7"),
]


def list_boards(actor_id):
    """Boards the actor owns or is a member of.

    Ordered by the actor's saved position (unpositioned boards last),
    then newest first.
    """
    require_auth(actor_id)
    member_of = (
        db.select(board_members.c.board_id)
        .where(board_members.c.user_id == actor_id)
    )
    return (
        Board.query
        .filter(db.or_(Board.owner_id == actor_id, Board.id.in_(member_of)))
        .order_by(
            Board.position.is_(None),
            Board.position,
            Board.created_at.desc(),
        )
        .all()
    )


def get_board(actor_id, board_id):
    return require_board_access(actor_id, board_id)


def create_board(actor_id, name, description=None, icon=None):
    """Create a board owned by the actor, with default columns and labels.

    Raises:
        NotAuthenticated: If no actor.
        ValueError: If name is empty.
    """
    require_auth(actor_id)
    name = clean_text(name)
    if not name:
        raise ValueError("Board name is required.")

    board = Board(
        name=name,
        description=clean_text(description) or None,
        icon=icon,
        owner_id=actor_id,
        custom_column_types=[],
    )
    db.session.add(board)
    db.session.flush()

    for i, (column_name, column_type) in enumerate(DEFAULT_COLUMNS):
        db.session.add(KanbanColumn(
            board_id=board.id, name=column_name, type=column_type, order=i,
        ))
    for label_name, color in DEFAULT_LABELS:
        db.session.add(Label(board_id=board.id, name=label_name, color=color))
    db.session.flush()

    logger.info(f"Board {board.id} created by {actor_id}")
    return board


def update_board(actor_id, board_id, name=None, description=None, icon=None):
    """Owner-only settings change. None leaves a field unchanged."""
    board = require_board_owner(actor_id, board_id)

    changed = []
    if name is not None:
        name = clean_text(name)
        if not name:
            raise ValueError("Board name is required.")
        board.name = name
        changed.append("name")
    if description is not None:
        board.description = clean_text(description)
        changed.append("description")
    if icon is not None:
        board.icon = icon
        changed.append("icon")
    db.session.flush()

    if changed:
        activity_service.log(
            board_id=board.id,
            user_id=actor_id,
            type="board_updated",
            metadata={"field_changed": ", ".join(changed)},
        )
    return board


def delete_board(actor_id, board_id):
    """Owner-only. Removes everything that hangs off the board."""
    board = require_board_owner(actor_id, board_id)
    purge_board(board)
    logger.info(f"Board {board_id} deleted by {actor_id}")


def purge_board(board):
    """Delete a board and every row that references it. No access check."""
    card_ids = [
        row.id for row in db.session.query(KanbanCard.id).filter_by(board_id=board.id)
    ]
    Notification.query.filter_by(board_id=board.id).delete(synchronize_session=False)
    if card_ids:
        Comment.query.filter(Comment.card_id.in_(card_ids)).delete(
            synchronize_session=False
        )
    for model in (Message, ChatReadStatus, JoinRequest, Activity):
        model.query.filter_by(board_id=board.id).delete(synchronize_session=False)
    # Cards go through the ORM so their assignee/label rows are cleared too.
    for card in KanbanCard.query.filter_by(board_id=board.id).all():
        db.session.delete(card)
    db.session.flush()

    db.session.delete(board)
    db.session.flush()


def add_member(actor_id, board_id, email):
    """Owner-only. Adds the user with this email as a member.

    Raises:
        NotFound: If no user has that email.
        ValueError: If the user already belongs to the board.
    """
    board = require_board_owner(actor_id, board_id)
    email = (email or "").strip().lower()
    user = User.query.filter(db.func.lower(User.email) == email).first()
    if user is None:
        raise NotFound("User not found")
    if board.has_access(user.id):
        raise ValueError("User is already a member")

    board.members.append(user)
    db.session.flush()

    activity_service.log(
        board_id=board.id,
        user_id=actor_id,
        type="member_added",
        target_user_id=user.id,
        metadata={"target_user_name": user.display_name},
    )
    return user


def remove_member(actor_id, board_id, member_id):
    """Owner-only. Removing someone who is not a member is a no-op."""
    board = require_board_owner(actor_id, board_id)
    member = next((m for m in board.members if m.id == member_id), None)
    if member is None:
        return
    board.members.remove(member)
    db.session.flush()

    activity_service.log(
        board_id=board.id,
        user_id=actor_id,
        type="member_removed",
        target_user_id=member.id,
        metadata={"target_user_name": member.display_name},
    )


def list_members(actor_id, board_id):
    """Owner first, then members."""
    board = require_board_access(actor_id, board_id)
    return [board.owner] + list(board.members)


def set_visibility(actor_id, board_id, is_public):
    board = require_board_owner(actor_id, board_id)
    board.is_public = bool(is_public)
    db.session.flush()
    return board


def list_public_boards(actor_id):
    """Public boards the actor is not already part of, newest first.

    Returns a list of (board, member_count) tuples; the count includes
    the owner.
    """
    require_auth(actor_id)
    boards = (
        Board.query
        .filter_by(is_public=True)
        .order_by(Board.created_at.desc())
        .all()
    )
    return [
        (b, len(b.members) + 1) for b in boards if not b.has_access(actor_id)
    ]


def reorder_boards(actor_id, board_ids):
    """Save the actor's board order. Unknown or inaccessible ids are skipped."""
    require_auth(actor_id)
    for i, board_id in enumerate(board_ids):
        board = db.session.get(Board, board_id)
        if board is not None and board.has_access(actor_id):
            board.position = i
    db.session.flush()


def set_custom_column_types(actor_id, board_id, types):
    """Owner-only. Replace the board's custom column type definitions.

    Args:
        types: List of {"id", "name", "color"} dicts. Ids must be unique
            and must not shadow a built-in column type.
    """
    board = require_board_owner(actor_id, board_id)

    cleaned = []
    seen = set()
    for entry in types or []:
        type_id = (entry.get("id") or "").strip()
        name = clean_text(entry.get("name"))
        if not type_id or not name:
            raise ValueError("Custom column types need an id and a name.")
        if type_id in KanbanColumn.TYPES:
            raise ValueError(f"'{type_id}' is a built-in column type.")
        if type_id in seen:
            raise ValueError(f"Duplicate column type id '{type_id}'.")
        seen.add(type_id)
        cleaned.append({"id": type_id, "name": name, "color": entry.get("color")})

    board.custom_column_types = cleaned
    db.session.flush()
    return board

"""Admin service — platform-wide user and board management.

Every function requires the acting user to carry the admin flag.
Functions flush but do NOT commit — the caller commits.
"""

import logging

from taskboard.errors import NotFound
from taskboard.extensions import db
from taskboard.models.board import Board, board_members
from taskboard.models.kanban import KanbanCard, card_assignees
from taskboard.models.user import User
from taskboard.services import board_service
from taskboard.services.access import require_admin

logger = logging.getLogger(__name__)


def is_admin(actor_id):
    """True when the actor is logged in and flagged as admin."""
    if not actor_id:
        return False
    user = db.session.get(User, actor_id)
    return bool(user and user.is_admin)


def _counts(column):
    """{value: row count} for a grouped column."""
    return dict(db.session.query(column, db.func.count()).group_by(column).all())


def list_users(actor_id):
    """Every user with board and card counts, newest account first."""
    require_admin(actor_id)

    owned = _counts(Board.owner_id)
    member = _counts(board_members.c.user_id)
    created = _counts(KanbanCard.created_by)
    assigned = _counts(card_assignees.c.user_id)

    users = User.query.order_by(User.created_at.desc()).all()
    result = []
    for user in users:
        owned_boards = owned.get(user.id, 0)
        member_boards = member.get(user.id, 0)
        result.append({
            "id": user.id,
            "name": user.name or "Unknown",
            "email": user.email,
            "image": user.image,
            "is_admin": bool(user.is_admin),
            "created_at": user.created_at.isoformat() if user.created_at else None,
            "stats": {
                "owned_boards": owned_boards,
                "member_boards": member_boards,
                "total_boards": owned_boards + member_boards,
                "created_cards": created.get(user.id, 0),
                "assigned_cards": assigned.get(user.id, 0),
            },
        })
    return result


def set_user_admin(actor_id, user_id, is_admin):
    """Grant or revoke the admin flag.

    Raises:
        NotFound: If the user does not exist.
        ValueError: If is_admin is not a boolean, or an admin tries to
            revoke their own flag.
    """
    require_admin(actor_id)
    if not isinstance(is_admin, bool):
        raise ValueError("is_admin must be true or false.")

    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    if user.id == actor_id and not is_admin:
        raise ValueError("You cannot remove your own admin access.")

    user.is_admin = is_admin
    db.session.flush()

    logger.info(f"Admin flag for {user.email} set to {is_admin} by {actor_id}")
    return user


def list_all_boards(actor_id):
    """Every board with owner, member and card counts, newest first."""
    require_admin(actor_id)

    cards = _counts(KanbanCard.board_id)
    boards = Board.query.order_by(Board.created_at.desc()).all()
    result = []
    for board in boards:
        owner = board.owner
        result.append({
            "id": board.id,
            "name": board.name,
            "description": board.description,
            "icon": board.icon,
            "is_public": bool(board.is_public),
            "owner": {
                "id": board.owner_id,
                "name": (owner.name if owner else None) or "Unknown",
                "email": owner.email if owner else "",
            },
            "member_count": len(board.members) + 1,
            "card_count": cards.get(board.id, 0),
            "created_at": board.created_at.isoformat() if board.created_at else None,
        })
    return result


def delete_board(actor_id, board_id):
    """Delete any board and everything that hangs off it."""
    require_admin(actor_id)
    board = db.session.get(Board, board_id)
    if board is None:
        raise NotFound("Board not found")

    board_service.purge_board(board)
    logger.info(f"Board {board_id} deleted by admin {actor_id}")

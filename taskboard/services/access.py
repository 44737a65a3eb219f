"""Identity and board-membership checks.

Every mutating service call starts here. The caller passes the acting
user's id (None when nobody is logged in); these helpers load the target
row and raise NotAuthenticated / NotFound / NotAuthorized before any
write happens.
"""

from taskboard.errors import NotAuthenticated, NotAuthorized, NotFound
from taskboard.extensions import db
from taskboard.models.board import Board
from taskboard.models.kanban import KanbanCard, KanbanColumn
from taskboard.models.user import User


def require_auth(actor_id):
    if not actor_id:
        raise NotAuthenticated()
    return actor_id


def require_admin(actor_id):
    """Return the acting User if it carries the admin flag."""
    require_auth(actor_id)
    user = db.session.get(User, actor_id)
    if user is None or not user.is_admin:
        raise NotAuthorized("Admin access required")
    return user


def require_board_access(actor_id, board_id):
    """Return the board if the actor is its owner or a member."""
    require_auth(actor_id)
    board = db.session.get(Board, board_id)
    if board is None:
        raise NotFound("Board not found")
    if not board.has_access(actor_id):
        raise NotAuthorized()
    return board


def require_board_owner(actor_id, board_id):
    board = require_board_access(actor_id, board_id)
    if not board.is_owner(actor_id):
        raise NotAuthorized("Only the board owner can perform this action")
    return board


def require_column_access(actor_id, column_id):
    """Return (column, board) for a column on a board the actor can edit."""
    require_auth(actor_id)
    column = db.session.get(KanbanColumn, column_id)
    if column is None:
        raise NotFound("Column not found")
    return column, require_board_access(actor_id, column.board_id)


def require_card_access(actor_id, card_id):
    """Return (card, board) for a card on a board the actor can edit."""
    require_auth(actor_id)
    card = db.session.get(KanbanCard, card_id)
    if card is None:
        raise NotFound("Card not found")
    return card, require_board_access(actor_id, card.board_id)


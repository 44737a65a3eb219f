"""Join request service — asking to join a public board.

Lifecycle: pending -> accepted | rejected, or deleted by the requester
while still pending. The board owner is notified of each new request.

Functions flush but do NOT commit — the caller commits.
"""

import logging
from datetime import datetime, timezone

from taskboard.errors import NotAuthorized, NotFound
from taskboard.extensions import db
from taskboard.models.board import Board
from taskboard.models.join_request import JoinRequest
from taskboard.models.notification import Notification
from taskboard.services import activity_service, notification_service
from taskboard.services.access import require_auth, require_board_owner
from taskboard.services.sanitize import clean_text

logger = logging.getLogger(__name__)


def _require_pending(actor_id, request_id):
    require_auth(actor_id)
    join_request = db.session.get(JoinRequest, request_id)
    if join_request is None:
        raise NotFound("Request not found")
    if join_request.status != "pending":
        raise ValueError("Request is not pending")
    return join_request


def request_to_join(actor_id, board_id, message=None):
    """Ask to join a public board.

    Raises:
        ValueError: If the board is private, the actor already belongs to
            it, or a request is already pending.
    """
    require_auth(actor_id)
    board = db.session.get(Board, board_id)
    if board is None:
        raise NotFound("Board not found")
    if not board.is_public:
        raise ValueError("Board is not public")
    if board.has_access(actor_id):
        raise ValueError("You are already a member of this board")

    existing = JoinRequest.query.filter_by(
        board_id=board.id, user_id=actor_id, status="pending"
    ).first()
    if existing is not None:
        raise ValueError("You already have a pending request for this board")

    join_request = JoinRequest(
        board_id=board.id,
        user_id=actor_id,
        status="pending",
        message=clean_text(message) or None,
    )
    db.session.add(join_request)
    db.session.flush()

    notification_service.notify(
        board.owner_id, "join_request", actor_id, board,
        join_request_id=join_request.id,
    )
    return join_request


def cancel_request(actor_id, request_id):
    join_request = _require_pending(actor_id, request_id)
    if join_request.user_id != actor_id:
        raise NotAuthorized()
    Notification.query.filter_by(join_request_id=join_request.id).delete(
        synchronize_session=False
    )
    db.session.delete(join_request)
    db.session.flush()


def list_for_board(actor_id, board_id):
    """Pending requests; owner only."""
    board = require_board_owner(actor_id, board_id)
    return (
        JoinRequest.query
        .filter_by(board_id=board.id, status="pending")
        .order_by(JoinRequest.created_at.asc())
        .all()
    )


def list_for_user(actor_id):
    """The actor's own pending requests."""
    require_auth(actor_id)
    return (
        JoinRequest.query
        .filter_by(user_id=actor_id, status="pending")
        .order_by(JoinRequest.created_at.desc())
        .all()
    )


def accept_request(actor_id, request_id):
    """Owner accepts: the requester becomes a member."""
    join_request = _require_pending(actor_id, request_id)
    board = require_board_owner(actor_id, join_request.board_id)

    join_request.status = "accepted"
    join_request.resolved_at = datetime.now(timezone.utc)
    requester = join_request.user
    if not board.has_access(requester.id):
        board.members.append(requester)
    db.session.flush()

    activity_service.log(
        board_id=board.id,
        user_id=actor_id,
        type="member_added",
        target_user_id=requester.id,
        metadata={"target_user_name": requester.display_name},
    )
    logger.info(f"Join request {join_request.id} accepted on board {board.id}")
    return join_request


def reject_request(actor_id, request_id):
    join_request = _require_pending(actor_id, request_id)
    require_board_owner(actor_id, join_request.board_id)
    join_request.status = "rejected"
    join_request.resolved_at = datetime.now(timezone.utc)
    db.session.flush()
    return join_request

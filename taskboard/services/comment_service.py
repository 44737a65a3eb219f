"""Comment service — card discussion threads.

Adding a comment logs `comment_added` and notifies every mentioned board
participant except the author. Only the author may edit a comment; the
author or the board owner may delete it.

Functions flush but do NOT commit — the caller commits.
"""

from taskboard.errors import NotAuthorized, NotFound
from taskboard.extensions import db
from taskboard.models.board import Board
from taskboard.models.comment import Comment
from taskboard.models.notification import Notification
from taskboard.services import activity_service, notification_service
from taskboard.services.access import (
    require_auth,
    require_card_access,
)
from taskboard.services.sanitize import clean_text


def _require_comment(actor_id, comment_id):
    require_auth(actor_id)
    comment = db.session.get(Comment, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    return comment


def list_comments(actor_id, card_id):
    """Oldest first."""
    require_card_access(actor_id, card_id)
    return (
        Comment.query
        .filter_by(card_id=card_id)
        .order_by(Comment.created_at.asc())
        .all()
    )


def count_comments(card_id):
    return Comment.query.filter_by(card_id=card_id).count()


def add_comment(actor_id, card_id, content):
    """Post a comment and fan out mention notifications.

    Returns:
        The created Comment.

    Raises:
        ValueError: If the content is empty after sanitizing.
    """
    card, board = require_card_access(actor_id, card_id)
    content = clean_text(content)
    if not content:
        raise ValueError("Comment cannot be empty")

    comment = Comment(card_id=card.id, user_id=actor_id, content=content)
    db.session.add(comment)
    db.session.flush()

    activity_service.log(
        board_id=board.id,
        user_id=actor_id,
        type="comment_added",
        card_id=card.id,
        metadata={"card_title": card.title},
    )
    notification_service.fan_out_mentions(
        content, "mention", actor_id, board,
        card_id=card.id, comment_id=comment.id,
    )
    return comment


def update_comment(actor_id, comment_id, content):
    comment = _require_comment(actor_id, comment_id)
    if comment.user_id != actor_id:
        raise NotAuthorized()
    content = clean_text(content)
    if not content:
        raise ValueError("Comment cannot be empty")
    comment.content = content
    db.session.flush()
    return comment


def delete_comment(actor_id, comment_id):
    comment = _require_comment(actor_id, comment_id)
    board = db.session.get(Board, comment.card.board_id)
    if comment.user_id != actor_id and (board is None or not board.is_owner(actor_id)):
        raise NotAuthorized()

    Notification.query.filter_by(comment_id=comment.id).delete(
        synchronize_session=False
    )
    db.session.delete(comment)
    db.session.flush()

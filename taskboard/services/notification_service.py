"""Notification service — mention parsing, fan-out, inbox operations.

Mentions come in two forms: `@[Name With Spaces]` and `@token`. Each
resolves against the board's participants by name or email,
case-insensitively.

Functions flush but do NOT commit — the caller commits.
"""

import logging
import re

from taskboard.errors import NotFound
from taskboard.extensions import db
from taskboard.models.notification import Notification
from taskboard.services.access import require_auth

logger = logging.getLogger(__name__)

BRACKET_MENTION_RE = re.compile(r"@\[([^\]]+)\]")
SIMPLE_MENTION_RE = re.compile(r"@(\S+)")


def _find_user(name, users):
    name = name.strip().lower()
    for user in users:
        if (user.name and user.name.lower() == name) or (
            user.email and user.email.lower() == name
        ):
            return user
    return None


def parse_mentions(text, users):
    """Return the ids of `users` mentioned in `text`, first-seen order, no repeats."""
    found = []
    for match in BRACKET_MENTION_RE.finditer(text or ""):
        user = _find_user(match.group(1), users)
        if user is not None and user.id not in found:
            found.append(user.id)

    without_brackets = BRACKET_MENTION_RE.sub("", text or "")
    for match in SIMPLE_MENTION_RE.finditer(without_brackets):
        user = _find_user(match.group(1), users)
        if user is not None and user.id not in found:
            found.append(user.id)
    return found


def notify(recipient_id, type, from_user_id, board, card_id=None,
           comment_id=None, message_id=None, join_request_id=None):
    """Create one notification unless the recipient is the sender or an outsider.

    Join-request notifications go to the board owner and skip the
    participant check, since the sender is by definition not a member.

    Returns:
        The Notification, or None when skipped.
    """
    if type not in Notification.TYPES:
        raise ValueError(f"Invalid notification type '{type}'.")
    if recipient_id == from_user_id:
        return None
    if type != "join_request" and not board.has_access(recipient_id):
        return None

    notification = Notification(
        user_id=recipient_id,
        type=type,
        from_user_id=from_user_id,
        board_id=board.id,
        card_id=card_id,
        comment_id=comment_id,
        message_id=message_id,
        join_request_id=join_request_id,
        read=False,
    )
    db.session.add(notification)
    db.session.flush()
    return notification


def fan_out_mentions(text, type, from_user_id, board, **refs):
    """Notify every board participant mentioned in `text`."""
    participants = [board.owner] + list(board.members)
    created = []
    for user_id in parse_mentions(text, participants):
        notification = notify(user_id, type, from_user_id, board, **refs)
        if notification is not None:
            created.append(notification)
    if created:
        logger.info(f"{type}: notified {len(created)} user(s) on board {board.id}")
    return created


def list_notifications(actor_id, limit=50):
    require_auth(actor_id)
    return (
        Notification.query
        .filter_by(user_id=actor_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )


def unread_count(actor_id):
    require_auth(actor_id)
    return Notification.query.filter_by(user_id=actor_id, read=False).count()


def mark_read(actor_id, notification_id):
    require_auth(actor_id)
    notification = db.session.get(Notification, notification_id)
    if notification is None or notification.user_id != actor_id:
        raise NotFound("Notification not found")
    notification.read = True
    db.session.flush()
    return notification


def mark_all_read(actor_id):
    require_auth(actor_id)
    count = (
        Notification.query
        .filter_by(user_id=actor_id, read=False)
        .update({"read": True}, synchronize_session=False)
    )
    db.session.flush()
    return count

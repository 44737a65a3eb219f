"""Message service — per-board team chat.

Functions flush but do NOT commit — the caller commits.
"""

from datetime import datetime, timezone

from taskboard.extensions import db
from taskboard.models.message import ChatReadStatus, Message
from taskboard.services import board_service, notification_service
from taskboard.services.access import require_auth, require_board_access
from taskboard.services.sanitize import clean_text


def send_message(actor_id, board_id, content):
    """Post to the board chat and notify mentioned participants.

    Raises:
        ValueError: If the message is empty after sanitizing.
    """
    board = require_board_access(actor_id, board_id)
    content = clean_text(content)
    if not content:
        raise ValueError("Message cannot be empty")

    message = Message(board_id=board.id, user_id=actor_id, content=content)
    db.session.add(message)
    db.session.flush()

    notification_service.fan_out_mentions(
        content, "chat_mention", actor_id, board, message_id=message.id,
    )
    return message


def list_messages(actor_id, board_id):
    """Oldest first."""
    require_board_access(actor_id, board_id)
    return (
        Message.query
        .filter_by(board_id=board_id)
        .order_by(Message.created_at.asc())
        .all()
    )


def mark_chat_read(actor_id, board_id, now=None):
    """Record that the actor has read the board chat up to now."""
    board = require_board_access(actor_id, board_id)
    now = now or datetime.now(timezone.utc)
    status = ChatReadStatus.query.filter_by(
        board_id=board.id, user_id=actor_id
    ).first()
    if status is None:
        status = ChatReadStatus(board_id=board.id, user_id=actor_id, last_read_at=now)
        db.session.add(status)
    else:
        status.last_read_at = now
    db.session.flush()
    return status


def unread_counts(actor_id):
    """{board_id: unread message count} for every board the actor is on.

    Only other people's messages count. Boards never read count all of them.
    """
    require_auth(actor_id)
    counts = {}
    for board in board_service.list_boards(actor_id):
        status = ChatReadStatus.query.filter_by(
            board_id=board.id, user_id=actor_id
        ).first()
        query = Message.query.filter(
            Message.board_id == board.id, Message.user_id != actor_id
        )
        if status is not None:
            query = query.filter(Message.created_at > status.last_read_at)
        counts[board.id] = query.count()
    return counts

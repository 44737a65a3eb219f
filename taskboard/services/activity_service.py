"""Activity service — append-only board event log and feeds.

log() is called from the other services after their own writes; it
never reads the rows it describes, so callers pass display names
(card title, column names) in metadata at the time of the change.

Functions flush but do NOT commit — the caller commits.
"""

import logging

from taskboard.extensions import db
from taskboard.models.activity import Activity
from taskboard.services.access import require_board_access, require_card_access

logger = logging.getLogger(__name__)

METADATA_KEYS = (
    "card_title",
    "from_column_name",
    "to_column_name",
    "column_name",
    "label_name",
    "target_user_name",
    "field_changed",
)


def log(board_id, user_id, type, card_id=None, column_id=None,
        target_user_id=None, label_id=None, metadata=None):
    """Append one activity record.

    Raises:
        ValueError: If type is not one of Activity.TYPES or metadata
            carries an unknown key.
    """
    if type not in Activity.TYPES:
        raise ValueError(f"Invalid activity type '{type}'.")
    metadata = {k: v for k, v in (metadata or {}).items() if v is not None}
    unknown = set(metadata) - set(METADATA_KEYS)
    if unknown:
        raise ValueError(f"Unknown activity metadata: {', '.join(sorted(unknown))}")

    activity = Activity(
        board_id=board_id,
        user_id=user_id,
        type=type,
        card_id=card_id,
        column_id=column_id,
        target_user_id=target_user_id,
        label_id=label_id,
        metadata_=metadata,
    )
    db.session.add(activity)
    db.session.flush()
    logger.debug(f"Activity {type} on board {board_id} by {user_id}")
    return activity


def list_by_board(actor_id, board_id, limit=50):
    require_board_access(actor_id, board_id)
    return (
        Activity.query
        .filter_by(board_id=board_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
        .all()
    )


def list_by_card(actor_id, card_id, limit=30):
    require_card_access(actor_id, card_id)
    return (
        Activity.query
        .filter_by(card_id=card_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
        .all()
    )

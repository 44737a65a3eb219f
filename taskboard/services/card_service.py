"""Card service — card fields, assignees and labels.

Placement (create / move / delete) lives in ordering_service; this module
covers everything else a member can change on a card.

Functions flush but do NOT commit — the caller commits.
"""

from datetime import datetime

from taskboard.extensions import db
from taskboard.models.kanban import KanbanCard, Label
from taskboard.models.user import User
from taskboard.services import activity_service, notification_service
from taskboard.services.access import require_board_access, require_card_access
from taskboard.services.sanitize import clean_text

# Marker for "field not supplied" so that None can mean "clear it".
UNSET = object()

EDITABLE_FIELDS = (
    "title",
    "description",
    "due_date",
    "color",
    "story_points",
    "time_estimate",
    "time_spent",
)
_INT_FIELDS = ("story_points", "time_estimate", "time_spent")


def list_cards(actor_id, board_id):
    require_board_access(actor_id, board_id)
    return (
        KanbanCard.query
        .filter_by(board_id=board_id)
        .order_by(KanbanCard.order)
        .all()
    )


def get_card(actor_id, card_id):
    card, _board = require_card_access(actor_id, card_id)
    return card


def update_card(actor_id, card_id, **fields):
    """Change any of EDITABLE_FIELDS. Pass None to clear an optional field.

    Raises:
        ValueError: On an unknown field, an empty title, or a negative
            number for points/time.
    """
    card, board = require_card_access(actor_id, card_id)

    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown card field(s): {', '.join(sorted(unknown))}")

    changed = []
    for field in EDITABLE_FIELDS:
        value = fields.get(field, UNSET)
        if value is UNSET:
            continue
        if field == "title":
            value = clean_text(value)
            if not value:
                raise ValueError("Title is required.")
        elif field == "description":
            value = clean_text(value) or None
        elif field == "due_date" and isinstance(value, str):
            value = datetime.fromisoformat(value)
        elif field in _INT_FIELDS and value is not None:
            value = int(value)
            if value < 0:
                raise ValueError(f"{field} cannot be negative.")
        if getattr(card, field) != value:
            setattr(card, field, value)
            changed.append(field)
    db.session.flush()

    if changed:
        activity_service.log(
            board_id=board.id,
            user_id=actor_id,
            type="card_updated",
            card_id=card.id,
            metadata={"card_title": card.title, "field_changed": ", ".join(changed)},
        )
    return card


def set_assignees(actor_id, card_id, user_ids):
    """Replace the card's assignees.

    Logs one activity per added/removed assignee and notifies newly added
    assignees other than the actor.

    Raises:
        ValueError: If any id is not a participant of the card's board.
    """
    card, board = require_card_access(actor_id, card_id)

    wanted = list(dict.fromkeys(user_ids))
    for user_id in wanted:
        if not board.has_access(user_id):
            raise ValueError("Assignees must be members of the board.")

    old_ids = card.assignee_ids
    added = [uid for uid in wanted if uid not in old_ids]
    removed = [uid for uid in old_ids if uid not in wanted]

    card.assignees = [db.session.get(User, uid) for uid in wanted]
    db.session.flush()

    for user_id in added:
        user = db.session.get(User, user_id)
        activity_service.log(
            board_id=board.id,
            user_id=actor_id,
            type="card_assigned",
            card_id=card.id,
            target_user_id=user_id,
            metadata={"card_title": card.title, "target_user_name": user.display_name},
        )
        notification_service.notify(
            user_id, "assignment", actor_id, board, card_id=card.id,
        )
    for user_id in removed:
        user = db.session.get(User, user_id)
        activity_service.log(
            board_id=board.id,
            user_id=actor_id,
            type="card_unassigned",
            card_id=card.id,
            target_user_id=user_id,
            metadata={
                "card_title": card.title,
                "target_user_name": user.display_name if user else None,
            },
        )
    return card


def set_labels(actor_id, card_id, label_ids):
    """Replace the card's labels, logging one activity per change.

    Raises:
        ValueError: If a label does not belong to the card's board.
    """
    card, board = require_card_access(actor_id, card_id)

    wanted = list(dict.fromkeys(label_ids))
    labels = []
    for label_id in wanted:
        label = db.session.get(Label, label_id)
        if label is None or label.board_id != board.id:
            raise ValueError("Labels must belong to the card's board.")
        labels.append(label)

    old_ids = card.label_ids
    old_labels = {lbl.id: lbl for lbl in card.labels}
    card.labels = labels
    db.session.flush()

    for label in labels:
        if label.id not in old_ids:
            activity_service.log(
                board_id=board.id,
                user_id=actor_id,
                type="label_added",
                card_id=card.id,
                label_id=label.id,
                metadata={"card_title": card.title, "label_name": label.name},
            )
    for label_id in old_ids:
        if label_id not in wanted:
            activity_service.log(
                board_id=board.id,
                user_id=actor_id,
                type="label_removed",
                card_id=card.id,
                label_id=label_id,
                metadata={
                    "card_title": card.title,
                    "label_name": old_labels[label_id].name,
                },
            )
    return card

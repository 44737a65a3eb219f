"""Label service — per-board labels.

Functions flush but do NOT commit — the caller commits.
"""

from taskboard.errors import NotFound
from taskboard.extensions import db
from taskboard.models.kanban import Label
from taskboard.services.access import require_auth, require_board_access
from taskboard.services.sanitize import clean_text


def _require_label(actor_id, label_id):
    require_auth(actor_id)
    label = db.session.get(Label, label_id)
    if label is None:
        raise NotFound("Label not found")
    require_board_access(actor_id, label.board_id)
    return label


def list_labels(actor_id, board_id):
    require_board_access(actor_id, board_id)
    return Label.query.filter_by(board_id=board_id).order_by(Label.name).all()


def create_label(actor_id, board_id, name, color):
    board = require_board_access(actor_id, board_id)
    name = clean_text(name)
    if not name:
        raise ValueError("Label name is required.")
    if not color:
        raise ValueError("Label color is required.")
    label = Label(board_id=board.id, name=name, color=color)
    db.session.add(label)
    db.session.flush()
    return label


def update_label(actor_id, label_id, name=None, color=None):
    label = _require_label(actor_id, label_id)
    if name is not None:
        name = clean_text(name)
        if not name:
            raise ValueError("Label name is required.")
        label.name = name
    if color is not None:
        label.color = color
    db.session.flush()
    return label


def delete_label(actor_id, label_id):
    """Delete a label; cards that carried it simply lose it."""
    label = _require_label(actor_id, label_id)
    db.session.delete(label)
    db.session.flush()

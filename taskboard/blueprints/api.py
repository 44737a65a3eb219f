"""Board API blueprint — /api/*

JSON endpoints for boards, columns, cards, labels, comments, chat,
notifications, join requests, activity feeds and user profiles. Session
auth via Flask-Login; the services decide what the caller may do.
CSRF-exempt (JSON clients only).

Route Map:
  GET/POST   /api/boards                          — List / create boards
  PUT        /api/boards/reorder                  — Save board order
  GET        /api/boards/public                   — Public boards to join
  GET/PATCH/DELETE /api/boards/<id>               — Board detail / settings / delete
  PUT        /api/boards/<id>/visibility          — Public / private
  PUT        /api/boards/<id>/column-types        — Custom column types
  GET/POST   /api/boards/<id>/members             — List / add member
  DELETE     /api/boards/<id>/members/<user_id>   — Remove member
  GET/POST   /api/boards/<id>/columns             — List / create column
  PUT        /api/boards/<id>/columns/reorder     — Reorder columns
  PATCH/DELETE /api/columns/<id>                  — Rename or retype / delete column
  GET        /api/boards/<id>/cards               — All cards on a board
  POST       /api/columns/<id>/cards              — Create card (appends)
  GET/PATCH/DELETE /api/cards/<id>                — Card detail / update / delete
  PUT        /api/cards/<id>/move                 — Move card (drag-and-drop)
  PUT        /api/cards/<id>/assignees            — Replace assignees
  PUT        /api/cards/<id>/labels               — Replace labels
  GET/POST   /api/boards/<id>/labels              — List / create label
  PATCH/DELETE /api/labels/<id>                   — Update / delete label
  GET/POST   /api/cards/<id>/comments             — List / add comment
  PATCH/DELETE /api/comments/<id>                 — Edit / delete comment
  GET/POST   /api/boards/<id>/messages            — Chat history / send
  POST       /api/boards/<id>/messages/read       — Mark chat read
  GET        /api/messages/unread                 — Unread chat counts
  GET        /api/notifications                   — Inbox
  GET        /api/notifications/unread-count      — Unread count
  POST       /api/notifications/<id>/read         — Mark one read
  POST       /api/notifications/read-all          — Mark all read
  GET/POST   /api/boards/<id>/join-requests       — Pending requests / request to join
  GET        /api/join-requests                   — My pending requests
  POST       /api/join-requests/<id>/accept       — Accept
  POST       /api/join-requests/<id>/reject       — Reject
  DELETE     /api/join-requests/<id>              — Cancel my request
  GET        /api/boards/<id>/activities          — Board activity feed
  GET        /api/cards/<id>/activities           — Card activity feed
  GET        /api/users?ids=a,b                   — Several users by id
  GET        /api/users/<id>                      — One user
  PATCH      /api/profile                         — Change my display name
  DELETE     /api/profile/image                   — Remove my profile image
  GET/PUT    /api/preferences                     — My preferences
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from taskboard.errors import BoardError
from taskboard.extensions import db, limiter
from taskboard.services import (
    activity_service,
    board_service,
    card_service,
    column_service,
    comment_service,
    join_request_service,
    label_service,
    message_service,
    notification_service,
    ordering_service,
    user_service,
)

api_bp = Blueprint("api", __name__, url_prefix="/api")

logger = logging.getLogger(__name__)


def _actor():
    """Id of the logged-in user, or None."""
    return current_user.id if current_user.is_authenticated else None


def _body():
    return request.get_json(silent=True) or {}


def _chat_limit():
    return current_app.config.get("CHAT_RATE_LIMIT", "30 per minute")


@api_bp.errorhandler(BoardError)
def handle_board_error(e):
    db.session.rollback()
    logger.info(f"{request.method} {request.path} rejected: {e.message}")
    return jsonify({"error": e.message}), e.status_code


@api_bp.errorhandler(ValueError)
def handle_value_error(e):
    db.session.rollback()
    logger.warning(f"{request.method} {request.path} invalid: {e}")
    return jsonify({"error": str(e)}), 400


# ─── Boards ──────────────────────────────────────────────────────

@api_bp.route("/boards", methods=["GET"])
def list_boards():
    boards = board_service.list_boards(_actor())
    return jsonify([b.to_dict() for b in boards])


@api_bp.route("/boards", methods=["POST"])
def create_board():
    data = _body()
    board = board_service.create_board(
        _actor(),
        name=data.get("name"),
        description=data.get("description"),
        icon=data.get("icon"),
    )
    db.session.commit()
    return jsonify(board.to_dict()), 201


@api_bp.route("/boards/reorder", methods=["PUT"])
def reorder_boards():
    board_service.reorder_boards(_actor(), _body().get("board_ids", []))
    db.session.commit()
    return jsonify({"success": True})


@api_bp.route("/boards/public", methods=["GET"])
def list_public_boards():
    result = []
    for board, member_count in board_service.list_public_boards(_actor()):
        item = board.to_dict()
        item["owner"] = board.owner.to_summary()
        item["member_count"] = member_count
        result.append(item)
    return jsonify(result)


@api_bp.route("/boards/<board_id>", methods=["GET"])
def get_board(board_id):
    board = board_service.get_board(_actor(), board_id)
    return jsonify(board.to_dict())


@api_bp.route("/boards/<board_id>", methods=["PATCH"])
def update_board(board_id):
    data = _body()
    board = board_service.update_board(
        _actor(),
        board_id,
        name=data.get("name"),
        description=data.get("description"),
        icon=data.get("icon"),
    )
    db.session.commit()
    return jsonify(board.to_dict())


@api_bp.route("/boards/<board_id>", methods=["DELETE"])
def delete_board(board_id):
    board_service.delete_board(_actor(), board_id)
    db.session.commit()
    return jsonify({"success": True})


@api_bp.route("/boards/<board_id>/visibility", methods=["PUT"])
def set_visibility(board_id):
    board = board_service.set_visibility(
        _actor(), board_id, bool(_body().get("is_public"))
    )
    db.session.commit()
    return jsonify(board.to_dict())


@api_bp.route("/boards/<board_id>/column-types", methods=["PUT"])
def set_column_types(board_id):
    board = board_service.set_custom_column_types(
        _actor(), board_id, _body().get("types", [])
    )
    db.session.commit()
    return jsonify(board.to_dict())


@api_bp.route("/boards/<board_id>/members", methods=["GET"])
def list_members(board_id):
    members = board_service.list_members(_actor(), board_id)
    return jsonify([m.to_summary() for m in members])


@api_bp.route("/boards/<board_id>/members", methods=["POST"])
def add_member(board_id):
    user = board_service.add_member(_actor(), board_id, _body().get("email"))
    db.session.commit()
    return jsonify(user.to_summary()), 201


@api_bp.route("/boards/<board_id>/members/<user_id>", methods=["DELETE"])
def remove_member(board_id, user_id):
    board_service.remove_member(_actor(), board_id, user_id)
    db.session.commit()
    return jsonify({"success": True})


# ─── Columns ─────────────────────────────────────────────────────

@api_bp.route("/boards/<board_id>/columns", methods=["GET"])
def list_columns(board_id):
    columns = column_service.list_columns(_actor(), board_id)
    return jsonify([c.to_dict() for c in columns])


@api_bp.route("/boards/<board_id>/columns", methods=["POST"])
def create_column(board_id):
    column = column_service.create_column(_actor(), board_id, _body().get("name"))
    db.session.commit()
    return jsonify(column.to_dict()), 201


@api_bp.route("/boards/<board_id>/columns/reorder", methods=["PUT"])
def reorder_columns(board_id):
    column_service.reorder_columns(
        _actor(), board_id, _body().get("column_ids", [])
    )
    db.session.commit()
    return jsonify({"success": True})


@api_bp.route("/columns/<column_id>", methods=["PATCH"])
def update_column(column_id):
    data = _body()
    column = None
    if "name" in data:
        column = column_service.rename_column(_actor(), column_id, data["name"])
    if "type" in data:
        column = column_service.set_column_type(_actor(), column_id, data["type"])
    if column is None:
        raise ValueError("Nothing to update.")
    db.session.commit()
    return jsonify(column.to_dict())


@api_bp.route("/columns/<column_id>", methods=["DELETE"])
def delete_column(column_id):
    column_service.delete_column(_actor(), column_id)
    db.session.commit()
    return jsonify({"success": True})


# ─── Cards ───────────────────────────────────────────────────────

@api_bp.route("/boards/<board_id>/cards", methods=["GET"])
def list_cards(board_id):
    cards = card_service.list_cards(_actor(), board_id)
    return jsonify([c.to_dict() for c in cards])


@api_bp.route("/columns/<column_id>/cards", methods=["POST"])
def create_card(column_id):
    data = _body()
    card = ordering_service.create_card(
        _actor(), column_id, data.get("title"), data.get("description")
    )
    db.session.commit()
    return jsonify(card.to_dict()), 201


@api_bp.route("/cards/<card_id>", methods=["GET"])
def get_card(card_id):
    card = card_service.get_card(_actor(), card_id)
    item = card.to_dict()
    item["comment_count"] = comment_service.count_comments(card.id)
    return jsonify(item)


@api_bp.route("/cards/<card_id>", methods=["PATCH"])
def update_card(card_id):
    data = _body()
    fields = {k: data[k] for k in card_service.EDITABLE_FIELDS if k in data}
    card = card_service.update_card(_actor(), card_id, **fields)
    db.session.commit()
    return jsonify(card.to_dict())


@api_bp.route("/cards/<card_id>", methods=["DELETE"])
def delete_card(card_id):
    ordering_service.delete_card(_actor(), card_id)
    db.session.commit()
    return jsonify({"success": True})


@api_bp.route("/cards/<card_id>/move", methods=["PUT"])
def move_card(card_id):
    data = _body()
    ordering_service.move_card(
        _actor(), card_id, data.get("column_id"), data.get("index")
    )
    db.session.commit()
    return jsonify({"success": True})


@api_bp.route("/cards/<card_id>/assignees", methods=["PUT"])
def set_assignees(card_id):
    card = card_service.set_assignees(
        _actor(), card_id, _body().get("user_ids", [])
    )
    db.session.commit()
    return jsonify(card.to_dict())


@api_bp.route("/cards/<card_id>/labels", methods=["PUT"])
def set_labels(card_id):
    card = card_service.set_labels(_actor(), card_id, _body().get("label_ids", []))
    db.session.commit()
    return jsonify(card.to_dict())


# ─── Labels ──────────────────────────────────────────────────────

@api_bp.route("/boards/<board_id>/labels", methods=["GET"])
def list_labels(board_id):
    labels = label_service.list_labels(_actor(), board_id)
    return jsonify([lbl.to_dict() for lbl in labels])


@api_bp.route("/boards/<board_id>/labels", methods=["POST"])
def create_label(board_id):
    data = _body()
    label = label_service.create_label(
        _actor(), board_id, data.get("name"), data.get("color")
    )
    db.session.commit()
    return jsonify(label.to_dict()), 201


@api_bp.route("/labels/<label_id>", methods=["PATCH"])
def update_label(label_id):
    data = _body()
    label = label_service.update_label(
        _actor(), label_id, name=data.get("name"), color=data.get("color")
    )
    db.session.commit()
    return jsonify(label.to_dict())


@api_bp.route("/labels/<label_id>", methods=["DELETE"])
def delete_label(label_id):
    label_service.delete_label(_actor(), label_id)
    db.session.commit()
    return jsonify({"success": True})


# ─── Comments ────────────────────────────────────────────────────

@api_bp.route("/cards/<card_id>/comments", methods=["GET"])
def list_comments(card_id):
    comments = comment_service.list_comments(_actor(), card_id)
    return jsonify([c.to_dict() for c in comments])


@api_bp.route("/cards/<card_id>/comments", methods=["POST"])
def add_comment(card_id):
    comment = comment_service.add_comment(_actor(), card_id, _body().get("content"))
    db.session.commit()
    return jsonify(comment.to_dict()), 201


@api_bp.route("/comments/<comment_id>", methods=["PATCH"])
def update_comment(comment_id):
    comment = comment_service.update_comment(
        _actor(), comment_id, _body().get("content")
    )
    db.session.commit()
    return jsonify(comment.to_dict())


@api_bp.route("/comments/<comment_id>", methods=["DELETE"])
def delete_comment(comment_id):
    comment_service.delete_comment(_actor(), comment_id)
    db.session.commit()
    return jsonify({"success": True})


# ─── Chat ────────────────────────────────────────────────────────

@api_bp.route("/boards/<board_id>/messages", methods=["GET"])
def list_messages(board_id):
    messages = message_service.list_messages(_actor(), board_id)
    return jsonify([m.to_dict() for m in messages])


@api_bp.route("/boards/<board_id>/messages", methods=["POST"])
@limiter.limit(_chat_limit)
def send_message(board_id):
    message = message_service.send_message(
        _actor(), board_id, _body().get("content")
    )
    db.session.commit()
    return jsonify(message.to_dict()), 201


@api_bp.route("/boards/<board_id>/messages/read", methods=["POST"])
def mark_chat_read(board_id):
    message_service.mark_chat_read(_actor(), board_id)
    db.session.commit()
    return jsonify({"success": True})


@api_bp.route("/messages/unread", methods=["GET"])
def unread_messages():
    return jsonify(message_service.unread_counts(_actor()))


# ─── Notifications ───────────────────────────────────────────────

@api_bp.route("/notifications", methods=["GET"])
def list_notifications():
    limit = current_app.config.get("NOTIFICATION_LIST_LIMIT", 50)
    notifications = notification_service.list_notifications(_actor(), limit=limit)
    return jsonify([n.to_dict() for n in notifications])


@api_bp.route("/notifications/unread-count", methods=["GET"])
def notification_unread_count():
    return jsonify({"count": notification_service.unread_count(_actor())})


@api_bp.route("/notifications/<notification_id>/read", methods=["POST"])
def mark_notification_read(notification_id):
    notification_service.mark_read(_actor(), notification_id)
    db.session.commit()
    return jsonify({"success": True})


@api_bp.route("/notifications/read-all", methods=["POST"])
def mark_all_notifications_read():
    count = notification_service.mark_all_read(_actor())
    db.session.commit()
    return jsonify({"success": True, "count": count})


# ─── Join requests ───────────────────────────────────────────────

@api_bp.route("/boards/<board_id>/join-requests", methods=["GET"])
def list_board_join_requests(board_id):
    requests_ = join_request_service.list_for_board(_actor(), board_id)
    return jsonify([r.to_dict() for r in requests_])


@api_bp.route("/boards/<board_id>/join-requests", methods=["POST"])
def request_to_join(board_id):
    join_request = join_request_service.request_to_join(
        _actor(), board_id, _body().get("message")
    )
    db.session.commit()
    return jsonify(join_request.to_dict()), 201


@api_bp.route("/join-requests", methods=["GET"])
def list_my_join_requests():
    requests_ = join_request_service.list_for_user(_actor())
    return jsonify([r.to_dict() for r in requests_])


@api_bp.route("/join-requests/<request_id>/accept", methods=["POST"])
def accept_join_request(request_id):
    join_request = join_request_service.accept_request(_actor(), request_id)
    db.session.commit()
    return jsonify(join_request.to_dict())


@api_bp.route("/join-requests/<request_id>/reject", methods=["POST"])
def reject_join_request(request_id):
    join_request = join_request_service.reject_request(_actor(), request_id)
    db.session.commit()
    return jsonify(join_request.to_dict())


@api_bp.route("/join-requests/<request_id>", methods=["DELETE"])
def cancel_join_request(request_id):
    join_request_service.cancel_request(_actor(), request_id)
    db.session.commit()
    return jsonify({"success": True})


# ─── Activity ────────────────────────────────────────────────────

@api_bp.route("/boards/<board_id>/activities", methods=["GET"])
def board_activities(board_id):
    limit = request.args.get(
        "limit", current_app.config.get("ACTIVITY_FEED_LIMIT", 50), type=int
    )
    activities = activity_service.list_by_board(_actor(), board_id, limit=limit)
    return jsonify([a.to_dict() for a in activities])


@api_bp.route("/cards/<card_id>/activities", methods=["GET"])
def card_activities(card_id):
    activities = activity_service.list_by_card(_actor(), card_id)
    return jsonify([a.to_dict() for a in activities])


# ─── Users and profile ───────────────────────────────────────────

@api_bp.route("/users", methods=["GET"])
def get_users():
    """?ids=a,b,c. Unknown ids are left out of the result."""
    ids = [i for i in request.args.get("ids", "").split(",") if i]
    users = user_service.get_users(_actor(), ids)
    return jsonify([u.to_summary() for u in users])


@api_bp.route("/users/<user_id>", methods=["GET"])
def get_user(user_id):
    return jsonify(user_service.get_user(_actor(), user_id).to_summary())


@api_bp.route("/profile", methods=["PATCH"])
def update_profile():
    user = user_service.update_profile(_actor(), _body().get("name"))
    db.session.commit()
    return jsonify(user.to_summary())


@api_bp.route("/profile/image", methods=["DELETE"])
def remove_profile_image():
    user = user_service.remove_profile_image(_actor())
    db.session.commit()
    return jsonify(user.to_summary())


@api_bp.route("/preferences", methods=["GET"])
def get_preferences():
    return jsonify(user_service.get_preferences(_actor()))


@api_bp.route("/preferences", methods=["PUT"])
def update_preferences():
    preferences = user_service.update_preferences(
        _actor(), sidebar_collapsed=_body().get("sidebar_collapsed")
    )
    db.session.commit()
    return jsonify(preferences)

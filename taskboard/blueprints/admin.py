"""Admin blueprint — /admin/*

Platform-wide user and board management. admin_service checks the admin
flag on every call; errors map to JSON the same way as /api.

Route Map:
  GET    /admin/status                — Is the caller an admin?
  GET    /admin/users                 — All users with board/card stats
  PUT    /admin/users/<id>/admin      — Grant or revoke admin
  GET    /admin/boards                — All boards with owner and counts
  DELETE /admin/boards/<id>           — Delete any board
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user

from taskboard.blueprints.api import handle_board_error, handle_value_error
from taskboard.errors import BoardError
from taskboard.extensions import db
from taskboard.services import admin_service

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")

admin_bp.register_error_handler(BoardError, handle_board_error)
admin_bp.register_error_handler(ValueError, handle_value_error)


def _actor():
    return current_user.id if current_user.is_authenticated else None


@admin_bp.route("/status")
def status():
    return jsonify({"is_admin": admin_service.is_admin(_actor())})


# ══════════════════════════════════════════════
#  USERS
# ══════════════════════════════════════════════

@admin_bp.route("/users")
def list_users():
    return jsonify(admin_service.list_users(_actor()))


@admin_bp.route("/users/<user_id>/admin", methods=["PUT"])
def set_user_admin(user_id):
    data = request.get_json(silent=True) or {}
    user = admin_service.set_user_admin(_actor(), user_id, data.get("is_admin"))
    db.session.commit()
    return jsonify({"success": True, "id": user.id, "is_admin": user.is_admin})


# ══════════════════════════════════════════════
#  BOARDS
# ══════════════════════════════════════════════

@admin_bp.route("/boards")
def list_boards():
    return jsonify(admin_service.list_all_boards(_actor()))


@admin_bp.route("/boards/<board_id>", methods=["DELETE"])
def delete_board(board_id):
    admin_service.delete_board(_actor(), board_id)
    db.session.commit()
    return jsonify({"success": True})

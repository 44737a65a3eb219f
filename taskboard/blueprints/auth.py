"""Auth blueprint — /auth/*

Thin JSON sign-up, login and logout over Flask-Login so API calls carry
a caller identity.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash

from taskboard.extensions import db, limiter
from taskboard.models.user import User
from taskboard.services import user_service
from taskboard.services.sanitize import clean_text

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


# ──────────────────────────────────────────────
# POST /auth/register
# ──────────────────────────────────────────────

@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per minute")
def register():
    """Open sign-up. Creates the account and logs it in."""
    if current_user.is_authenticated:
        return jsonify({"error": "Already logged in."}), 400

    data = request.get_json(silent=True) or request.form
    email = (data.get("email") or "").lower().strip()
    password = data.get("password") or ""
    name = clean_text(data.get("name") or "")

    errors = user_service.registration_errors(email, password, name)
    if errors:
        return jsonify({"error": errors[0], "errors": errors}), 400

    user = user_service.register_user(email, password, name)
    db.session.commit()

    login_user(user)
    return jsonify(user.to_summary()), 201


# ──────────────────────────────────────────────
# POST /auth/login
# ──────────────────────────────────────────────

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("15 per minute")
def login():
    """Email + password login. Accepts JSON or a form post."""
    data = request.get_json(silent=True) or request.form
    email = (data.get("email") or "").lower().strip()
    password = data.get("password") or ""
    remember = bool(data.get("remember"))

    if not email or not password:
        return jsonify({"error": "Email and password are required."}), 400

    user = User.query.filter_by(email=email).first()

    if user is None or not check_password_hash(user.password_hash, password):
        return jsonify({"error": "Invalid email or password."}), 401

    if not user.is_active:
        return jsonify({"error": "Your account has been deactivated."}), 403

    login_user(user, remember=remember)
    return jsonify(user.to_summary())


# ──────────────────────────────────────────────
# POST /auth/logout
# ──────────────────────────────────────────────

@auth_bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    return jsonify({"success": True})


# ──────────────────────────────────────────────
# GET /auth/me
# ──────────────────────────────────────────────

@auth_bp.route("/me")
@login_required
def me():
    return jsonify(current_user.to_summary())

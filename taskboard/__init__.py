import os
import logging

import click
from flask import Flask, jsonify
from werkzeug.security import generate_password_hash

from taskboard.config import config_by_name
from taskboard.extensions import db, migrate, login_manager, csrf, limiter


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from taskboard import models  # noqa: F401

    # --- Register blueprints ---
    from taskboard.blueprints.admin import admin_bp
    from taskboard.blueprints.api import api_bp
    from taskboard.blueprints.auth import auth_bp

    app.register_blueprint(admin_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(auth_bp)

    # JSON clients only, no form tokens
    csrf.exempt(admin_bp)
    csrf.exempt(api_bp)
    csrf.exempt(auth_bp)

    # --- Root route ---
    @app.route("/")
    def index():
        return jsonify({"service": "taskboard", "status": "ok"})

    # --- Error handlers ---
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({"error": "Too many requests"}), 429

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        return jsonify({"error": "Something went wrong"}), 500

    # --- CLI commands ---
    register_cli(app)

    # --- Security headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none';"
        )
        # Strict Transport Security (only in production)
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("seed-demo")
    @click.option("--email", default="demo@taskboard.local", help="Owner email")
    @click.option("--password", default="demo1234", help="Owner password")
    @click.option("--member-email", default="teammate@taskboard.local",
                  help="Second user added as a board member")
    def seed_demo(email, password, member_email):
        """Create an owner, a teammate and a demo board with a few cards.

        Usage:
            flask seed-demo
            flask seed-demo --email me@example.com --password s3cret
        """
        from taskboard.models.user import User
        from taskboard.services import board_service, card_service, ordering_service

        def get_or_create(address, name):
            user = User.query.filter_by(email=address).first()
            if user is not None:
                click.echo(f"User already exists: {address}")
                return user
            user = User(
                email=address,
                password_hash=generate_password_hash(password),
                name=name,
            )
            db.session.add(user)
            db.session.flush()
            click.echo(f"Created user: {address}")
            return user

        owner = get_or_create(email, "Demo Owner")
        teammate = get_or_create(member_email, "Teammate")

        board = board_service.create_board(
            owner.id, "Demo Board", description="Sample board from seed-demo"
        )
        board_service.add_member(owner.id, board.id, teammate.email)

        columns = {c.name: c for c in board.columns}
        todo, in_progress = columns["To Do"], columns["In Progress"]
        first = ordering_service.create_card(owner.id, todo.id, "Write the brief")
        ordering_service.create_card(owner.id, todo.id, "Collect feedback")
        ordering_service.create_card(owner.id, in_progress.id, "Draft wireframes")
        card_service.set_assignees(owner.id, first.id, [teammate.id])

        db.session.commit()

        click.echo("")
        click.echo("=" * 60)
        click.echo("Seed data created successfully!")
        click.echo("=" * 60)
        click.echo(f"  Owner:    {email} / {password}")
        click.echo(f"  Teammate: {member_email} / {password}")
        click.echo(f"  Board:    {board.name} (id: {board.id})")
        click.echo("=" * 60)

    @app.cli.command("seed-admin")
    @click.option("--email", default="admin@taskboard.local", help="Admin email")
    @click.option("--password", default="admin1234", help="Admin password")
    def seed_admin(email, password):
        """Create an admin user, or grant admin to an existing one.

        Usage:
            flask seed-admin
            flask seed-admin --email admin@example.com --password s3cret
        """
        from taskboard.models.user import User

        user = User.query.filter_by(email=email).first()
        if user is not None:
            user.is_admin = True
            click.echo(f"Granted admin to existing user: {email}")
        else:
            user = User(
                email=email,
                password_hash=generate_password_hash(password),
                name="Admin",
                is_admin=True,
            )
            db.session.add(user)
            click.echo(f"Created admin user: {email}")

        db.session.commit()

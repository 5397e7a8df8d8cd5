import logging

import click
from flask import Flask, request, g
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Config
from routes import health_bp, auth_bp, processing_bp, admin_bp, users_api_bp

from models import db
from flask_migrate import Migrate
from utils.seed import seed_bootstrap_admin
from utils.auth_context import load_current_user
from security.csrf import require_csrf


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    proxies = app.config.get("TRUSTED_PROXY_COUNT", 0)
    if proxies:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxies)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(processing_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(users_api_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Seed the bootstrap admin at startup (safe & idempotent)
    with app.app_context():
        if app.config.get("CREATE_TABLES_ON_START"):
            db.create_all()
        seed_bootstrap_admin()

    @app.before_request
    def _load_user():
        load_current_user()

    CSRF_EXEMPT_PATHS = {
        "/auth/login",
        "/api/check",
        "/api/health",
    }

    @app.before_request
    def _csrf_protect():
        # Only protect state-changing requests
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            # Exempt auth bootstrap endpoints
            if request.path in CSRF_EXEMPT_PATHS:
                return None

            # Only enforce CSRF if user is already authenticated (cookie session)
            if getattr(g, "user", None) is not None:
                failure = require_csrf()
                if failure:
                    return failure

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
from models.user import User
from processing import sessions
from processing.batch import run_batch
from security import guard
from security.password import hash_password
from utils.accounts import find_user_by_email, normalize_email, parse_allowed_ips

def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote a user to admin by email (bootstrap)."""
        user = find_user_by_email(email)
        if not user:
            click.echo("User not found")
            return

        if user.role != "admin":
            user.role = "admin"
            db.session.commit()

        click.echo(f"{user.email} promoted to admin")

    @app.cli.command("create-user")
    @click.argument("email")
    @click.password_option()
    @click.option("--name", default="", help="Display name.")
    @click.option("--admin", is_flag=True, help="Create with the admin role.")
    @click.option("--days", type=int, default=None, help="Subscription days.")
    @click.option("--allow-ip", "allowed_ips", multiple=True, help="Restrict login to this IP (repeatable).")
    def create_user(email, password, name, admin, days, allowed_ips):
        """Create a user account."""
        if find_user_by_email(email):
            click.echo("Email already exists")
            return

        user = User(
            name=name or None,
            email=normalize_email(email),
            password_hash=hash_password(password),
            role="admin" if admin else "user",
            subscription_days=days if days is not None else app.config.get("DEFAULT_SUBSCRIPTION_DAYS", 30),
            allowed_ips=parse_allowed_ips(list(allowed_ips)),
        )
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created {user.role} {user.email} (id={user.id})")

    @app.cli.command("process")
    @click.argument("path", type=click.File("r"))
    @click.option("--email", required=True, help="Account whose session counters are updated.")
    def process(path, email):
        """Classify every line of PATH, as the dashboard would."""
        user = find_user_by_email(email)
        if not user:
            click.echo("User not found")
            return

        sess = sessions.get_or_create_session(user.id)

        def _echo(result):
            mark = "APPROVED" if result.approved else "REJECTED"
            click.echo(f"{mark}\t{result.input}\t{result.message}")

        run_batch(sess, path.read(), on_result=_echo)
        click.echo(
            f"tested={sess.tested_count} approved={sess.approved_count} rejected={sess.rejected_count}"
        )

    @app.cli.command("unban-ip")
    @click.argument("ban_id", type=int)
    def unban_ip(ban_id):
        """Remove an IP ban by id."""
        if guard.unban(ban_id):
            click.echo(f"Ban {ban_id} removed")
        else:
            click.echo(f"Ban {ban_id} not found")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)

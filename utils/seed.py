from flask import current_app
from sqlalchemy import inspect

from models import db
from models.user import User
from security.password import hash_password


def seed_bootstrap_admin():
    """Create the bootstrap admin when the users table is empty (idempotent)."""
    # tables not migrated yet (e.g. during `flask db upgrade`)
    if not inspect(db.engine).has_table(User.__tablename__):
        return None
    if User.query.first() is not None:
        return None

    cfg = current_app.config
    admin = User(
        name="Administrator",
        email=cfg.get("BOOTSTRAP_ADMIN_EMAIL", "admin@terramail.com").strip().lower(),
        password_hash=hash_password(cfg.get("BOOTSTRAP_ADMIN_PASSWORD", "admin123")),
        role="admin",
        subscription_days=cfg.get("BOOTSTRAP_ADMIN_SUBSCRIPTION_DAYS", 999),
        allowed_ips=[],
        is_banned=False,
    )
    db.session.add(admin)
    db.session.commit()
    current_app.logger.info("Seeded bootstrap admin %s", admin.email)
    return admin

"""Server-issued login sessions.

The browser only ever holds a random token; the database keeps its SHA-256
digest, so a leaked table cannot be replayed as cookies.
"""
import hashlib
import secrets
from datetime import timedelta

from flask import request, current_app

from models import db
from models.db import utcnow
from models.session import Session


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(user_id: int, ip: str = None, user_agent: str = None) -> str:
    """Persist a new session for ``user_id`` and return the raw token for the cookie."""
    raw_token = secrets.token_urlsafe(32)
    lifetime = current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60)

    db.session.add(Session(
        user_id=user_id,
        token_hash=_hash_token(raw_token),
        expires_at=utcnow() + timedelta(seconds=lifetime),
        ip=ip,
        user_agent=(user_agent or "")[:255] or None,
    ))
    db.session.commit()
    return raw_token


def get_session_from_request():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "terramail_session")
    raw_token = request.cookies.get(cookie_name)
    if not raw_token:
        return None

    sess = Session.query.filter_by(token_hash=_hash_token(raw_token)).first()
    now = utcnow()
    if not sess or not sess.is_usable(now, current_app.config.get("IDLE_TIMEOUT_SECONDS", 1800)):
        return None

    # touch
    sess.last_seen_at = now
    db.session.commit()
    return sess


def revoke_session(raw_token: str) -> bool:
    if not raw_token:
        return False
    sess = Session.query.filter_by(token_hash=_hash_token(raw_token)).first()
    if not sess:
        return False
    sess.revoked = True
    db.session.commit()
    return True


def revoke_all_sessions(user_id: int) -> int:
    """Revoke every live session of a user (login rotation, logout_all, ban)."""
    count = (
        Session.query
        .filter_by(user_id=user_id, revoked=False)
        .update({Session.revoked: True}, synchronize_session="fetch")
    )
    db.session.commit()
    return count

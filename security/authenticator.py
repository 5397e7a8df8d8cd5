import logging

from flask import current_app

from security import guard
from security.errors import (
    AccountBanned,
    InvalidCredentials,
    IpBanned,
    IpNotAllowed,
    RateLimited,
)
from security.password import verify_password
from security.session import create_session, revoke_all_sessions
from utils.accounts import find_user_by_email

logger = logging.getLogger(__name__)

AUTO_BAN_REASON = "Too many failed login attempts"


def authenticate(email: str, password: str, ip: str, now=None):
    """
    Validate a login and return the user.

    Checks run in a fixed order and stop at the first failure, each raising
    a LoginError subclass. Failed attempts are recorded for unknown emails,
    disallowed IPs and bad passwords; a banned account is rejected without
    recording one.
    """
    cfg = current_app.config
    threshold = cfg.get("LOGIN_FAILURE_THRESHOLD", 5)
    window_hours = cfg.get("LOGIN_FAILURE_WINDOW_HOURS", 1)
    ban_hours = cfg.get("AUTO_BAN_HOURS", 24)

    if guard.is_banned(ip, now=now):
        raise IpBanned()

    if guard.recent_failures(ip, window_hours, now=now) >= threshold:
        guard.ban(ip, AUTO_BAN_REASON, ban_hours, now=now)
        raise RateLimited(f"Too many failed attempts. IP banned for {ban_hours} hours.")

    user = find_user_by_email(email)
    if not user:
        guard.record_attempt(ip, email, False, now=now)
        raise InvalidCredentials()

    if user.is_banned:
        raise AccountBanned()

    allowed = user.allowed_ips or []
    if allowed and ip not in allowed:
        guard.record_attempt(ip, email, False, now=now)
        raise IpNotAllowed()

    if not verify_password(password, user.password_hash):
        guard.record_attempt(ip, email, False, now=now)
        raise InvalidCredentials()

    guard.record_attempt(ip, email, True, now=now)
    logger.info("User %s logged in from %s", user.email, ip)
    return user


def login(email: str, password: str, ip: str, user_agent: str = None):
    """authenticate() plus a fresh server-side session. Returns (user, raw_token).

    Any sessions the user already holds are revoked first.
    """
    user = authenticate(email, password, ip)
    revoke_all_sessions(user.id)
    return user, create_session(user.id, ip=ip, user_agent=user_agent)

"""IP ban list and sliding-window failed-login counter.

Every check runs at login time against the ``banned_ips`` and
``login_attempts`` tables; there is no background sweep. Expired bans are
left in place and simply stop matching; they also shadow any later ban
for the same IP, since only the first row is consulted.
"""
import logging
from datetime import timedelta

from sqlalchemy import func

from models import db
from models.db import utcnow
from models.banned_ip import BannedIP
from models.login_attempt import LoginAttempt

logger = logging.getLogger(__name__)


def is_banned(ip: str, now=None) -> bool:
    """
    True if the first ban row for this IP is permanent or not yet expired.
    Later rows for the same IP are not consulted.
    """
    ban = (
        BannedIP.query
        .filter_by(ip_address=ip)
        .order_by(BannedIP.id.asc())
        .first()
    )
    if not ban:
        return False
    return ban.is_active(now)


def recent_failures(ip: str, window_hours: float, now=None) -> int:
    cutoff = (now or utcnow()) - timedelta(hours=window_hours)
    return (
        LoginAttempt.query
        .filter(
            LoginAttempt.ip_address == ip,
            LoginAttempt.success.is_(False),
            LoginAttempt.created_at > cutoff,
        )
        .count()
    )


def ban(ip: str, reason: str, hours=None, now=None) -> BannedIP:
    """Append a ban. ``hours=None`` bans permanently."""
    now = now or utcnow()
    row = BannedIP(
        ip_address=ip,
        reason=reason,
        banned_until=None if hours is None else now + timedelta(hours=hours),
        created_at=now,
    )
    db.session.add(row)
    db.session.commit()
    logger.warning("Banned IP %s until %s: %s", ip, row.banned_until or "forever", reason)
    return row


def unban(ban_id: int) -> bool:
    row = db.session.get(BannedIP, ban_id)
    if not row:
        return False
    db.session.delete(row)
    db.session.commit()
    logger.info("Removed ban %s for IP %s", ban_id, row.ip_address)
    return True


def record_attempt(ip: str, email, success: bool, now=None) -> LoginAttempt:
    row = LoginAttempt(
        ip_address=ip,
        user_email=email or None,
        success=success,
        created_at=now or utcnow(),
    )
    db.session.add(row)
    db.session.commit()
    return row


def recent_attempts(limit: int = 50):
    return (
        LoginAttempt.query
        .order_by(LoginAttempt.created_at.desc(), LoginAttempt.id.desc())
        .limit(limit)
        .all()
    )


def list_bans():
    return BannedIP.query.order_by(BannedIP.created_at.desc(), BannedIP.id.desc()).all()


def enforced_ban_ids() -> set:
    """Lowest ban id per IP; the only rows is_banned ever consults."""
    rows = db.session.query(func.min(BannedIP.id)).group_by(BannedIP.ip_address).all()
    return {ban_id for (ban_id,) in rows}


def ban_listing(bans, now=None) -> list:
    """Serialise bans with ``active`` matching what is_banned enforces."""
    enforced = enforced_ban_ids()
    listing = []
    for row in bans:
        item = row.to_dict()
        item["active"] = row.id in enforced and row.is_active(now)
        listing.append(item)
    return listing

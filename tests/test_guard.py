from datetime import timedelta

from models.banned_ip import BannedIP
from models.db import utcnow
from models.login_attempt import LoginAttempt
from security import guard

IP = "198.51.100.7"


def test_is_banned_false_without_records(app):
    assert guard.is_banned(IP) is False


def test_temporary_ban_expires_without_deleting_the_row(app):
    now = utcnow()
    guard.ban(IP, "manual", hours=24, now=now)

    assert guard.is_banned(IP, now=now + timedelta(hours=23)) is True
    assert guard.is_banned(IP, now=now + timedelta(hours=24, seconds=1)) is False
    assert BannedIP.query.count() == 1


def test_permanent_ban(app):
    row = guard.ban(IP, "manual", hours=None)

    assert row.banned_until is None
    assert guard.is_banned(IP, now=utcnow() + timedelta(days=3650)) is True


def test_first_matching_ban_wins(app):
    now = utcnow()
    guard.ban(IP, "old", hours=1, now=now - timedelta(hours=5))
    guard.ban(IP, "new", hours=24, now=now)

    # only the oldest row is consulted
    assert guard.is_banned(IP, now=now) is False


def test_ban_is_per_ip(app):
    guard.ban(IP, "manual", hours=24)
    assert guard.is_banned("198.51.100.8") is False


def test_unban_removes_and_is_idempotent(app):
    row = guard.ban(IP, "manual", hours=24)
    ban_id = row.id

    assert guard.unban(ban_id) is True
    assert guard.is_banned(IP) is False
    assert guard.unban(ban_id) is False
    assert guard.unban(9999) is False


def test_recent_failures_counts_only_failed_attempts_inside_window(app):
    now = utcnow()
    guard.record_attempt(IP, "a@b.com", False, now=now - timedelta(minutes=10))
    guard.record_attempt(IP, "a@b.com", False, now=now - timedelta(minutes=59))
    guard.record_attempt(IP, "a@b.com", True, now=now - timedelta(minutes=5))
    guard.record_attempt(IP, "a@b.com", False, now=now - timedelta(hours=2))
    guard.record_attempt("10.0.0.1", "a@b.com", False, now=now)

    assert guard.recent_failures(IP, 1, now=now) == 2
    assert guard.recent_failures(IP, 3, now=now) == 3


def test_record_attempt_keeps_email_for_audit(app):
    guard.record_attempt(IP, "Nobody@Example.com", False)
    row = LoginAttempt.query.one()
    assert row.user_email == "Nobody@Example.com"
    assert row.success is False


def test_recent_attempts_newest_first(app):
    now = utcnow()
    for minutes in (30, 20, 10):
        guard.record_attempt(IP, f"{minutes}@x.com", False, now=now - timedelta(minutes=minutes))

    rows = guard.recent_attempts(limit=2)
    assert [r.user_email for r in rows] == ["10@x.com", "20@x.com"]

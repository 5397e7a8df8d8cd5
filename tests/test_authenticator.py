from datetime import timedelta

import pytest

from models.banned_ip import BannedIP
from models.db import utcnow
from models.login_attempt import LoginAttempt
from security import guard
from security.authenticator import authenticate, AUTO_BAN_REASON
from security.errors import (
    AccountBanned,
    InvalidCredentials,
    IpBanned,
    IpNotAllowed,
    RateLimited,
)

from tests.conftest import USER_PASSWORD

IP = "203.0.113.50"


def _attempts(success=None):
    q = LoginAttempt.query
    if success is not None:
        q = q.filter_by(success=success)
    return q.count()


def test_successful_login_records_attempt(app, make_user):
    user = make_user()

    assert authenticate("user@terramail.com", USER_PASSWORD, IP).id == user.id
    assert _attempts(success=True) == 1
    assert _attempts(success=False) == 0


def test_email_lookup_is_case_insensitive(app):
    user = authenticate("Admin@Terramail.com", "admin123", IP)
    assert user.email == "admin@terramail.com"


def test_unknown_email_records_failure(app):
    with pytest.raises(InvalidCredentials):
        authenticate("ghost@terramail.com", "whatever", IP)

    row = LoginAttempt.query.one()
    assert row.user_email == "ghost@terramail.com"
    assert row.success is False


def test_wrong_password_records_failure(app, make_user):
    make_user()
    with pytest.raises(InvalidCredentials):
        authenticate("user@terramail.com", "wrong-password1", IP)
    assert _attempts(success=False) == 1


def test_banned_account_is_rejected_without_recording(app, make_user):
    make_user(is_banned=True)
    with pytest.raises(AccountBanned):
        authenticate("user@terramail.com", USER_PASSWORD, IP)
    assert _attempts() == 0


def test_ip_not_in_allow_list(app, make_user):
    make_user(allowed_ips=["10.1.1.1"])
    with pytest.raises(IpNotAllowed):
        authenticate("user@terramail.com", USER_PASSWORD, IP)
    assert _attempts(success=False) == 1

    assert authenticate("user@terramail.com", USER_PASSWORD, "10.1.1.1").email == "user@terramail.com"


def test_banned_ip_short_circuits_everything(app, make_user):
    make_user()
    guard.ban(IP, "manual", hours=24)

    with pytest.raises(IpBanned):
        authenticate("user@terramail.com", USER_PASSWORD, IP)
    assert _attempts() == 0


def test_sixth_attempt_is_auto_banned_even_with_correct_credentials(app, make_user):
    make_user()
    for _ in range(5):
        with pytest.raises(InvalidCredentials):
            authenticate("user@terramail.com", "bad-password1", IP)

    with pytest.raises(RateLimited):
        authenticate("user@terramail.com", USER_PASSWORD, IP)

    ban = BannedIP.query.filter_by(ip_address=IP).one()
    assert ban.reason == AUTO_BAN_REASON
    assert ban.banned_until is not None
    delta = ban.banned_until - ban.created_at
    assert delta == timedelta(hours=24)
    # the rate-limited attempt itself is not recorded
    assert _attempts() == 5

    with pytest.raises(IpBanned):
        authenticate("user@terramail.com", USER_PASSWORD, IP)


def test_old_failures_fall_out_of_window(app, make_user):
    make_user()
    past = utcnow() - timedelta(hours=2)
    for _ in range(5):
        guard.record_attempt(IP, "user@terramail.com", False, now=past)

    assert authenticate("user@terramail.com", USER_PASSWORD, IP).email == "user@terramail.com"


def test_failures_on_other_ips_do_not_count(app, make_user):
    make_user()
    for _ in range(5):
        guard.record_attempt("192.0.2.1", "user@terramail.com", False)

    assert authenticate("user@terramail.com", USER_PASSWORD, IP).email == "user@terramail.com"


def test_threshold_is_configurable(app, make_user):
    app.config["LOGIN_FAILURE_THRESHOLD"] = 2
    make_user()
    for _ in range(2):
        with pytest.raises(InvalidCredentials):
            authenticate("user@terramail.com", "bad-password1", IP)

    with pytest.raises(RateLimited):
        authenticate("user@terramail.com", USER_PASSWORD, IP)

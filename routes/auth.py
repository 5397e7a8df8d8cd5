from flask import Blueprint, request, jsonify, current_app, g

from security.authenticator import login as authenticate_and_login
from security.csrf import issue_csrf_token, clear_csrf_token
from security.errors import LoginError
from security.session import revoke_session, revoke_all_sessions
from utils.audit import log_event
from utils.auth_context import login_required
from utils.net import client_ip, user_agent


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _user_payload(user) -> dict:
    payload = user.to_dict()
    payload["is_admin"] = user.is_admin
    return payload


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""
    ip = client_ip()

    if not email or not password:
        return jsonify(error="email and password are required"), 400

    try:
        user, raw_token = authenticate_and_login(email, password, ip, user_agent())
    except LoginError as exc:
        log_event("LOGIN_FAIL", metadata={"email": email, "code": exc.code})
        return jsonify(error=exc.message, code=exc.code), exc.status

    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "terramail_session")
    max_age = current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60)

    resp = jsonify(message="Login OK", user=_user_payload(user))
    resp.set_cookie(
        cookie_name,
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=max_age,
        path="/",
    )
    resp = issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", user_id=user.id)
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(_user_payload(g.user)), 200


@auth_bp.post("/logout")
@login_required
def logout():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "terramail_session")
    raw_token = request.cookies.get(cookie_name)

    revoke_session(raw_token)
    log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name, path="/")
    clear_csrf_token(resp)
    return resp, 200


@auth_bp.post("/logout_all")
@login_required
def logout_all():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "terramail_session")

    count = revoke_all_sessions(g.user.id)
    log_event("LOGOUT_ALL", user_id=g.user.id, metadata={"revoked_sessions": count})

    resp = jsonify(message="Logged out everywhere", revoked_sessions=count)
    resp.delete_cookie(cookie_name, path="/")
    clear_csrf_token(resp)
    return resp, 200

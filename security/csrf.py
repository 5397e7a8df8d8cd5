import hmac
import secrets
from flask import request, jsonify, current_app

CSRF_COOKIE = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"

def issue_csrf_token(resp):
    token = secrets.token_urlsafe(32)
    resp.set_cookie(
        current_app.config.get("CSRF_COOKIE_NAME", CSRF_COOKIE),
        token,
        httponly=False,  # must be readable by client JS
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60),
        path="/",
    )
    return resp

def clear_csrf_token(resp):
    resp.delete_cookie(current_app.config.get("CSRF_COOKIE_NAME", CSRF_COOKIE), path="/")
    return resp

def require_csrf():
    cookie_token = request.cookies.get(current_app.config.get("CSRF_COOKIE_NAME", CSRF_COOKIE))
    header_token = request.headers.get(CSRF_HEADER)
    if not cookie_token or not header_token or not hmac.compare_digest(cookie_token, header_token):
        return jsonify(error="CSRF validation failed"), 403
    return None

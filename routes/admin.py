from flask import Blueprint, jsonify, g, request, current_app

from models import db
from models.audit_log import AuditLog
from models.user import User
from security import guard
from security.rbac import require_role
from security.session import revoke_all_sessions
from utils.audit import log_event

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _get_user_or_404(user_id: int):
    user = db.session.get(User, user_id)
    if not user:
        return None, (jsonify(error="User not found"), 404)
    return user, None


@admin_bp.get("/users")
@require_role("admin")
def list_users():
    role_filter = (request.args.get("role") or "").strip().lower()
    q = User.query
    if role_filter:
        q = q.filter(User.role == role_filter)

    users = q.order_by(User.created_at.desc()).limit(500).all()
    return jsonify([u.to_dict() for u in users]), 200


@admin_bp.post("/users/<int:user_id>/ban")
@require_role("admin")
def ban_user(user_id: int):
    user, error = _get_user_or_404(user_id)
    if error:
        return error
    if user.id == g.user.id:
        return jsonify(error="Cannot ban yourself"), 403

    user.is_banned = True
    db.session.commit()
    revoked = revoke_all_sessions(user.id)

    log_event("ADMIN_BAN_USER", user_id=g.user.id, entity="user", entity_id=user.id,
              metadata={"revoked_sessions": revoked})
    return jsonify(user.to_dict()), 200


@admin_bp.post("/users/<int:user_id>/unban")
@require_role("admin")
def unban_user(user_id: int):
    user, error = _get_user_or_404(user_id)
    if error:
        return error

    user.is_banned = False
    db.session.commit()

    log_event("ADMIN_UNBAN_USER", user_id=g.user.id, entity="user", entity_id=user.id)
    return jsonify(user.to_dict()), 200


@admin_bp.post("/users/<int:user_id>/subscription")
@require_role("admin")
def extend_subscription(user_id: int):
    data = request.get_json(silent=True) or {}
    days = data.get("days")
    if not isinstance(days, int) or isinstance(days, bool):
        return jsonify(error="days must be an integer"), 400

    user, error = _get_user_or_404(user_id)
    if error:
        return error

    user.subscription_days = max(0, user.subscription_days + days)
    db.session.commit()

    log_event("ADMIN_EXTEND_SUBSCRIPTION", user_id=g.user.id, entity="user", entity_id=user.id,
              metadata={"days": days, "subscription_days": user.subscription_days})
    return jsonify(user.to_dict()), 200


@admin_bp.get("/banned-ips")
@require_role("admin")
def list_banned_ips():
    return jsonify(guard.ban_listing(guard.list_bans())), 200


@admin_bp.post("/banned-ips")
@require_role("admin")
def create_ban():
    data = request.get_json(silent=True) or {}
    ip = (data.get("ip_address") or "").strip()
    reason = (data.get("reason") or "").strip() or "Manually banned by admin"

    if not ip or len(ip) > 64:
        return jsonify(error="ip_address is required"), 400

    # explicit null means permanent
    if "hours" in data:
        hours = data["hours"]
        max_hours = current_app.config.get("MAX_BAN_HOURS", 100 * 365 * 24)
        if hours is not None and (
            isinstance(hours, bool) or not isinstance(hours, (int, float)) or not 0 < hours <= max_hours
        ):
            return jsonify(error=f"hours must be a number between 0 and {max_hours}, or null"), 400
    else:
        hours = current_app.config.get("MANUAL_BAN_HOURS", 24)

    row = guard.ban(ip, reason, hours)
    log_event("ADMIN_BAN_IP", user_id=g.user.id, entity="banned_ip", entity_id=row.id,
              metadata={"ip_address": ip, "hours": hours})
    return jsonify(guard.ban_listing([row])[0]), 201


@admin_bp.delete("/banned-ips/<int:ban_id>")
@require_role("admin")
def delete_ban(ban_id: int):
    removed = guard.unban(ban_id)
    if removed:
        log_event("ADMIN_UNBAN_IP", user_id=g.user.id, entity="banned_ip", entity_id=ban_id)
    return jsonify(message="Ban removed" if removed else "Ban not found", removed=removed), 200


@admin_bp.get("/login-attempts")
@require_role("admin")
def list_login_attempts():
    default_limit = current_app.config.get("LOGIN_ATTEMPTS_LIMIT", 50)
    limit = request.args.get("limit", type=int) or default_limit
    limit = max(1, min(limit, 500))
    return jsonify([a.to_dict() for a in guard.recent_attempts(limit)]), 200


@admin_bp.get("/audit-logs")
@require_role("admin")
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    action = request.args.get("action")
    user_id = request.args.get("user_id", type=int)

    q = AuditLog.query
    if action:
        q = q.filter(AuditLog.action == action)
    if user_id is not None:
        q = q.filter(AuditLog.user_id == user_id)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([r.to_dict() for r in rows]), 200

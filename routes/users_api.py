from flask import Blueprint, jsonify, g, request, current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.processing_session import ProcessingSession
from models.session import Session
from models.user import User
from security.password import hash_password
from security.password_policy import validate_password
from security.rbac import require_role
from utils.accounts import (
    find_user_by_email,
    is_valid_email,
    normalize_email,
    parse_allowed_ips,
    parse_role,
)
from utils.audit import log_event

users_api_bp = Blueprint("users_api", __name__, url_prefix="/api/users")


def _fail(error: str, status: int = 400):
    return jsonify(success=False, error=error), status


def _parse_subscription_days(value):
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError("subscription_days must be a non-negative integer")
    return value


def _apply_updates(user: User, data: dict):
    """Copy editable fields from ``data`` onto ``user``; raises ValueError on bad input."""
    if "name" in data:
        name = data["name"]
        if not isinstance(name, str) or len(name.strip()) > 120:
            raise ValueError("Invalid name")
        user.name = name.strip()

    if "email" in data:
        email = normalize_email(data["email"] if isinstance(data["email"], str) else "")
        if not is_valid_email(email):
            raise ValueError("Invalid email")
        existing = find_user_by_email(email)
        if existing and existing.id != user.id:
            raise ValueError("Email already exists")
        user.email = email

    if "password" in data:
        valid, errors = validate_password(data["password"])
        if not valid:
            raise ValueError("; ".join(errors))
        user.password_hash = hash_password(data["password"])

    if "role" in data:
        user.role = parse_role(data["role"])
    if "subscription_days" in data:
        user.subscription_days = _parse_subscription_days(data["subscription_days"])
    if "allowed_ips" in data:
        user.allowed_ips = parse_allowed_ips(data["allowed_ips"])
    if "is_banned" in data:
        if not isinstance(data["is_banned"], bool):
            raise ValueError("is_banned must be a boolean")
        user.is_banned = data["is_banned"]


@users_api_bp.post("")
@require_role("admin")
def create_user():
    data = request.get_json(silent=True) or {}
    name = data.get("name")
    email = data.get("email")
    password = data.get("password")

    if not isinstance(name, str) or not name.strip():
        return _fail("name is required")
    if not isinstance(email, str) or not is_valid_email(normalize_email(email)):
        return _fail("Invalid email")
    if not isinstance(password, str) or not password:
        return _fail("password is required")
    if find_user_by_email(email):
        return _fail("Email already exists")

    user = User(
        role="user",
        subscription_days=current_app.config.get("DEFAULT_SUBSCRIPTION_DAYS", 30),
        allowed_ips=[],
        is_banned=False,
    )
    try:
        _apply_updates(user, data)
    except ValueError as exc:
        return _fail(str(exc))

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return _fail("Email already exists")

    log_event("ADMIN_CREATE_USER", user_id=g.user.id, entity="user", entity_id=user.id)
    return jsonify(success=True, user=user.to_dict()), 201


@users_api_bp.get("")
@require_role("admin")
def list_users():
    try:
        users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    except SQLAlchemyError:
        current_app.logger.exception("Failed to fetch users")
        return _fail("Failed to fetch users", 500)
    return jsonify(success=True, users=[u.to_dict() for u in users]), 200


@users_api_bp.put("/<int:user_id>")
@require_role("admin")
def update_user(user_id: int):
    data = request.get_json(silent=True) or {}
    user = db.session.get(User, user_id)
    if not user:
        return _fail("User not found", 404)

    try:
        _apply_updates(user, data)
        db.session.commit()
    except ValueError as exc:
        db.session.rollback()
        return _fail(str(exc))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to update user %s", user_id)
        return _fail("Failed to update user", 500)

    log_event("ADMIN_UPDATE_USER", user_id=g.user.id, entity="user", entity_id=user.id,
              metadata={"fields": sorted(k for k in data if k != "password")})
    return jsonify(success=True, user=user.to_dict()), 200


@users_api_bp.delete("/<int:user_id>")
@require_role("admin")
def delete_user(user_id: int):
    if user_id == g.user.id:
        return _fail("Cannot delete yourself", 403)

    user = db.session.get(User, user_id)
    if not user:
        return jsonify(success=True), 200

    try:
        Session.query.filter_by(user_id=user.id).delete()
        ProcessingSession.query.filter_by(user_id=user.id).delete()
        db.session.delete(user)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to delete user %s", user_id)
        return _fail("Failed to delete user", 500)

    log_event("ADMIN_DELETE_USER", user_id=g.user.id, entity="user", entity_id=user_id)
    return jsonify(success=True), 200

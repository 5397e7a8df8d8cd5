from sqlalchemy import func

from models.user import User, ROLES


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


def find_user_by_email(email: str):
    """Case-insensitive exact match on the stored email."""
    normalized = normalize_email(email)
    if not normalized:
        return None
    return User.query.filter(func.lower(User.email) == normalized).first()


def parse_allowed_ips(value):
    """Accepts a list or a newline/comma separated string; returns unique, trimmed IPs."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.replace(",", "\n").split("\n")
    if not isinstance(value, (list, tuple)):
        raise ValueError("allowed_ips must be a list of strings")

    ips = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("allowed_ips must be a list of strings")
        item = item.strip()
        if item and item not in ips:
            ips.append(item)
    return ips


def parse_role(value) -> str:
    role = (value or "user").strip().lower() if isinstance(value, str) else None
    if role not in ROLES:
        raise ValueError(f"role must be one of {', '.join(ROLES)}")
    return role

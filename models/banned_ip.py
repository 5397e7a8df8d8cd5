from models.db import db, utcnow


class BannedIP(db.Model):
    __tablename__ = "banned_ips"

    id = db.Column(db.Integer, primary_key=True)
    ip_address = db.Column(db.String(64), nullable=False, index=True)
    reason = db.Column(db.String(255), nullable=True)
    banned_until = db.Column(db.DateTime, nullable=True)  # NULL = permanent
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def is_active(self, now=None) -> bool:
        if self.banned_until is None:
            return True
        return self.banned_until > (now or utcnow())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ip_address": self.ip_address,
            "reason": self.reason,
            "banned_until": self.banned_until.isoformat() if self.banned_until else None,
            "created_at": self.created_at.isoformat(),
            "active": self.is_active(),
        }

from models.db import db, utcnow

class LoginAttempt(db.Model):
    __tablename__ = "login_attempts"

    id = db.Column(db.Integer, primary_key=True)

    ip_address = db.Column(db.String(64), nullable=False, index=True)
    # email as typed by the client, kept even when no such user exists
    user_email = db.Column(db.String(255), nullable=True)
    success = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ip_address": self.ip_address,
            "user_email": self.user_email,
            "success": self.success,
            "created_at": self.created_at.isoformat(),
        }

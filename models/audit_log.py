from models.db import db, utcnow


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True)     # acting user; NULL for anonymous logins
    action = db.Column(db.String(80), nullable=False)  # LOGIN_FAIL, ADMIN_BAN_IP, PROCESSING_RUN ...
    entity = db.Column(db.String(80), nullable=True)   # user, banned_ip, processing_session
    entity_id = db.Column(db.String(80), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.timestamp.isoformat(),
            "user_id": self.user_id,
            "action": self.action,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "ip": self.ip,
            "user_agent": self.user_agent,
            "metadata": self.metadata_json,
        }

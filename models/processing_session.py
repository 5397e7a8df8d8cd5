from models.db import db, utcnow


class ProcessingSession(db.Model):
    __tablename__ = "processing_sessions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    approved_count = db.Column(db.Integer, default=0, nullable=False)
    rejected_count = db.Column(db.Integer, default=0, nullable=False)
    loaded_count = db.Column(db.Integer, default=0, nullable=False)
    tested_count = db.Column(db.Integer, default=0, nullable=False)
    is_active = db.Column(db.Boolean, default=False, nullable=False)
    stop_requested = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "approved_count": self.approved_count,
            "rejected_count": self.rejected_count,
            "loaded_count": self.loaded_count,
            "tested_count": self.tested_count,
            "is_active": self.is_active,
            "stop_requested": self.stop_requested,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

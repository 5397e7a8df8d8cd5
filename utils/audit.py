import json
from flask import has_request_context
from models import db
from models.audit_log import AuditLog
from utils.net import client_ip, user_agent

def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    ip = None
    ua = None
    if has_request_context():
        ip = client_ip()
        ua = user_agent() or None

    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=ua,
        metadata_json=json.dumps(metadata) if metadata else None
    )
    db.session.add(row)
    db.session.commit()

from .db import db
from .user import User
from .audit_log import AuditLog
from .session import Session
from .login_attempt import LoginAttempt
from .banned_ip import BannedIP
from .processing_session import ProcessingSession

from .health import health_bp
from .auth import auth_bp
from .processing import processing_bp
from .admin import admin_bp
from .users_api import users_api_bp

import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as terramail.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "terramail.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Run db.create_all() at startup instead of `flask db upgrade`
    CREATE_TABLES_ON_START = os.getenv("CREATE_TABLES_ON_START", "false").lower() == "true"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Reverse proxies in front of the app whose X-Forwarded-For hop is trusted.
    # 0 means the socket peer is the client IP.
    TRUSTED_PROXY_COUNT = int(os.getenv("TRUSTED_PROXY_COUNT", "0"))

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "terramail_session"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 30 minutes
    IDLE_TIMEOUT_SECONDS = 30 * 60

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Password policy for admin-created accounts
    PASSWORD_MIN_LEN = int(os.getenv("PASSWORD_MIN_LEN", "8"))
    PASSWORD_MAX_LEN = 128
    PASSWORD_REQUIRE_UPPER = False
    PASSWORD_REQUIRE_LOWER = True
    PASSWORD_REQUIRE_DIGIT = True
    PASSWORD_REQUIRE_SYMBOL = False

    # Login guard: N failures per IP inside the window triggers an auto-ban
    LOGIN_FAILURE_THRESHOLD = 5
    LOGIN_FAILURE_WINDOW_HOURS = 1
    AUTO_BAN_HOURS = 24
    MANUAL_BAN_HOURS = 24
    MAX_BAN_HOURS = 100 * 365 * 24     # longer than this, ban permanently
    LOGIN_ATTEMPTS_LIMIT = 50           # rows shown in the admin login log

    # Accounts
    DEFAULT_SUBSCRIPTION_DAYS = 30
    BOOTSTRAP_ADMIN_EMAIL = os.getenv("BOOTSTRAP_ADMIN_EMAIL", "admin@terramail.com")
    BOOTSTRAP_ADMIN_PASSWORD = os.getenv("BOOTSTRAP_ADMIN_PASSWORD", "admin123")
    BOOTSTRAP_ADMIN_SUBSCRIPTION_DAYS = 999

    # Item classifier (remote verdict service, local heuristic when unset/unreachable)
    CLASSIFIER_ENDPOINT = os.getenv("CLASSIFIER_ENDPOINT")
    CLASSIFIER_TIMEOUT_SECONDS = float(os.getenv("CLASSIFIER_TIMEOUT_SECONDS", "10"))

    # Pause between batch items (anti-burst pacing)
    BATCH_ITEM_DELAY_SECONDS = float(os.getenv("BATCH_ITEM_DELAY_SECONDS", "0.1"))
    # A run with no committed progress for this long is treated as dead
    BATCH_STALE_SECONDS = int(os.getenv("BATCH_STALE_SECONDS", "300"))

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    CREATE_TABLES_ON_START = True
    BCRYPT_ROUNDS = 4
    CLASSIFIER_ENDPOINT = None
    BATCH_ITEM_DELAY_SECONDS = 0
    TRUSTED_PROXY_COUNT = 1
    BOOTSTRAP_ADMIN_PASSWORD = "admin123"

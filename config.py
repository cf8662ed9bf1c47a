import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Identity provider
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ACCESS_TOKEN_MINUTES = int(data.get("ACCESS_TOKEN_MINUTES", 60))
    MAGIC_LINK_MINUTES = int(data.get("MAGIC_LINK_MINUTES", 15))
    AUTH_REDIRECT_URL = data.get("AUTH_REDIRECT_URL", "http://localhost:5173/auth/callback")
    SIGN_IN_PATH = data.get("SIGN_IN_PATH", "/auth/sign-in")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "dev-admin-key-change-in-production")

    # Session policy (uniform for every role and tenant)
    IDLE_TIMEOUT_MINUTES = int(data.get("IDLE_TIMEOUT_MINUTES", 30))
    WARNING_COUNTDOWN_MINUTES = int(data.get("WARNING_COUNTDOWN_MINUTES", 2))
    ABSOLUTE_SESSION_HOURS = int(data.get("ABSOLUTE_SESSION_HOURS", 8))
    ACTIVITY_THROTTLE_SECONDS = int(data.get("ACTIVITY_THROTTLE_SECONDS", 5))
    AUTH_GRACE_PERIOD_SECONDS = int(data.get("AUTH_GRACE_PERIOD_SECONDS", 60))

    # Client-local state keys
    ACTIVE_TENANT_KEY = data.get("ACTIVE_TENANT_KEY", "tribes_active_tenant")
    CONTEXT_BY_TENANT_KEY = data.get("CONTEXT_BY_TENANT_KEY", "tribes_context_by_tenant")
    SESSION_START_KEY = data.get("SESSION_START_KEY", "tribes-session-start")
    SESSION_ACTIVITY_KEY = data.get("SESSION_ACTIVITY_KEY", "tribes-session-activity")
    SESSION_SYNC_CHANNEL = data.get("SESSION_SYNC_CHANNEL", "tribes-session-sync")

    # Notifications
    NOTIFICATION_ARCHIVE_DAYS = int(data.get("NOTIFICATION_ARCHIVE_DAYS", 90))
    NOTIFICATION_POLL_SECONDS = int(data.get("NOTIFICATION_POLL_SECONDS", 30))
    NOTIFICATION_PAGE_SIZE = int(data.get("NOTIFICATION_PAGE_SIZE", 50))

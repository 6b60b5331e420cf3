import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Dashboards and exports render timestamps in this zone; storage stays UTC.
EVENT_TIMEZONE = os.getenv("EVENT_TIMEZONE", "Asia/Manila")

MIN_WINDOW_MINUTES = int(os.getenv("MIN_WINDOW_MINUTES", "15"))
MAX_WINDOW_MINUTES = int(os.getenv("MAX_WINDOW_MINUTES", "480"))
MIN_WINDOW_GAP_MINUTES = int(os.getenv("MIN_WINDOW_GAP_MINUTES", "5"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed programs and the admin account on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

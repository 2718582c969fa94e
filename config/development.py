import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timekeeping_db"),
}

# "mysql" or "memory"
STORAGE = os.getenv("STORAGE", "mysql")

DEBUG = True

# If enabled, app will apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Attendance policy
WORK_START_TIME = os.getenv("WORK_START_TIME", "09:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))
LATE_DETECTION_ENABLED = os.getenv("LATE_DETECTION_ENABLED", "1")
BREAK_MINUTES = int(os.getenv("BREAK_MINUTES", "0"))
STANDARD_WORK_HOURS = float(os.getenv("STANDARD_WORK_HOURS", "8"))
OVERTIME_ENABLED = os.getenv("OVERTIME_ENABLED", "0")
HALF_DAY_THRESHOLD_HOURS = os.getenv("HALF_DAY_THRESHOLD_HOURS") or None

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console")

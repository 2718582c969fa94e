import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timekeeping_test"),
}

STORAGE = os.getenv("STORAGE", "memory")

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

WORK_START_TIME = "09:00"
LATE_GRACE_MINUTES = 5
LATE_DETECTION_ENABLED = True
BREAK_MINUTES = 0
STANDARD_WORK_HOURS = 8
OVERTIME_ENABLED = False
HALF_DAY_THRESHOLD_HOURS = None

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

LOG_LEVEL = "WARNING"
LOG_FORMAT = "console"

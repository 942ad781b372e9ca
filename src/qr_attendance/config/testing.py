import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance_test"),
    "connection_timeout": 2,
}

INSTITUTION_TIMEZONE = ""

SCAN_TIMEOUT_SECONDS = 2.0
SCAN_HISTORY_LIMIT = 10
RECORDED_BY = "sbo"

LOG_LEVEL = "WARNING"
LOG_DIR = ""

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

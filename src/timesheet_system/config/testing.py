import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

WEEK_START_DAY = 0
REQUIRE_EMPLOYEE_APPROVAL = True
EXPORT_WORKERS = 1
EXPORT_JOB_TTL_SECONDS = 60

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

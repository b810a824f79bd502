import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

WEEK_START_DAY = int(os.getenv("WEEK_START_DAY", "0"))
REQUIRE_EMPLOYEE_APPROVAL = bool(int(os.getenv("REQUIRE_EMPLOYEE_APPROVAL", "1")))
EXPORT_WORKERS = int(os.getenv("EXPORT_WORKERS", "4"))
EXPORT_JOB_TTL_SECONDS = int(os.getenv("EXPORT_JOB_TTL_SECONDS", "900"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

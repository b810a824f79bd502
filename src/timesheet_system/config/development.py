import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Company week for week totals: 0 = Monday ... 6 = Sunday
WEEK_START_DAY = int(os.getenv("WEEK_START_DAY", "0"))
# When disabled, manager approval alone finalizes a timesheet
REQUIRE_EMPLOYEE_APPROVAL = bool(int(os.getenv("REQUIRE_EMPLOYEE_APPROVAL", "1")))
EXPORT_WORKERS = int(os.getenv("EXPORT_WORKERS", "2"))
# Finished background exports nobody downloaded are dropped after this many seconds
EXPORT_JOB_TTL_SECONDS = int(os.getenv("EXPORT_JOB_TTL_SECONDS", "900"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_WEEK_START_DAY = 0  # Monday
DEFAULT_JOB_CODE = "ACT001"
NOTES_MAX_LENGTH = 500
DEFAULT_EXPORT_WORKERS = 2
DEFAULT_EXPORT_JOB_TTL_SECONDS = 15 * 60

PLACEHOLDER = "N/A"
UNKNOWN_EMPLOYEE = "Unknown"

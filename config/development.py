import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_attendance"),
}

# Check-in later than shift start + grace is marked late
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
# Check-out with fewer worked hours than this is marked half-day
HALF_DAY_HOURS = float(os.getenv("HALF_DAY_HOURS", "4"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

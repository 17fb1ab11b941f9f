import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_ledger"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

DEFAULT_IN_TIME = os.getenv("DEFAULT_IN_TIME", "09:00")
DEFAULT_OUT_TIME = os.getenv("DEFAULT_OUT_TIME", "18:00")
MONTHLY_LEAVE_ACCRUAL = float(os.getenv("MONTHLY_LEAVE_ACCRUAL", "2"))
BULK_MAX_WORKERS = int(os.getenv("BULK_MAX_WORKERS", "4"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SECRET_KEY = "test-secret"

STORE_BACKEND = "memory"

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "attendance_ledger_test",
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

DEFAULT_IN_TIME = "09:00"
DEFAULT_OUT_TIME = "18:00"
MONTHLY_LEAVE_ACCRUAL = 2
BULK_MAX_WORKERS = 1

LOG_LEVEL = "WARNING"

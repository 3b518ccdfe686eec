import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

ATTENDANCE_WRITE_MODE = os.getenv("ATTENDANCE_WRITE_MODE", "append")
D2D_BATCH_EXEMPT = bool(int(os.getenv("D2D_BATCH_EXEMPT", "1")))
REPORT_DATE_FORMAT = os.getenv("REPORT_DATE_FORMAT", "%d/%m/%Y")

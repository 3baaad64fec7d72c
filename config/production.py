import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

FACE_PROVIDER = os.getenv("FACE_PROVIDER", "face_recognition")

FACE_VERIFY_DISTANCE_THRESHOLD = float(os.getenv("FACE_VERIFY_DISTANCE_THRESHOLD", "0.35"))
FACE_ENROLL_DISTANCE_THRESHOLD = float(os.getenv("FACE_ENROLL_DISTANCE_THRESHOLD", "0.8"))
REFRESH_FACE_TEMPLATE = bool(int(os.getenv("REFRESH_FACE_TEMPLATE", "1")))

EARLY_GRACE_MINUTES = int(os.getenv("EARLY_GRACE_MINUTES", "30"))
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
MIN_SESSION_MINUTES = int(os.getenv("MIN_SESSION_MINUTES", "1"))

import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE") or None

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# "face_recognition" decodes camera frames server-side; "client" accepts browser descriptors only
FACE_PROVIDER = os.getenv("FACE_PROVIDER", "client")

FACE_VERIFY_DISTANCE_THRESHOLD = float(os.getenv("FACE_VERIFY_DISTANCE_THRESHOLD", "0.35"))
FACE_ENROLL_DISTANCE_THRESHOLD = float(os.getenv("FACE_ENROLL_DISTANCE_THRESHOLD", "0.8"))
REFRESH_FACE_TEMPLATE = bool(int(os.getenv("REFRESH_FACE_TEMPLATE", "1")))

EARLY_GRACE_MINUTES = int(os.getenv("EARLY_GRACE_MINUTES", "30"))
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
MIN_SESSION_MINUTES = int(os.getenv("MIN_SESSION_MINUTES", "1"))

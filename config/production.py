import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "community_registry"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SUPER_USER_EMAIL = os.getenv("SUPER_USER_EMAIL", "").strip() or None
SUPER_USER_PHONE = os.getenv("SUPER_USER_PHONE", "").strip() or None

REGISTRATION_MAX_ATTEMPTS = int(os.getenv("REGISTRATION_MAX_ATTEMPTS", "5"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

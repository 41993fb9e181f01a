import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "community_registry_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

SUPER_USER_EMAIL = "owner@example.org"
SUPER_USER_PHONE = None

REGISTRATION_MAX_ATTEMPTS = 5
LOG_LEVEL = "WARNING"

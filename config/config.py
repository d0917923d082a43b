"""Settings shared by every environment; env modules override what differs."""

import os

SECRET_KEY = os.environ.get("SECRET_KEY") or "attendance-ledger-dev"

# mysql | firestore | memory
STORE_BACKEND = os.environ.get("STORE_BACKEND", "mysql").lower()

DB_CONFIG = {
    "host": os.environ.get("DB_HOST", "localhost"),
    "port": int(os.environ.get("DB_PORT", "3306")),
    "user": os.environ.get("DB_USER", "root"),
    "password": os.environ.get("DB_PASSWORD", ""),
    "database": os.environ.get("DB_NAME", "attendance_ledger"),
}

FIREBASE_PROJECT_ID = os.environ.get("FIREBASE_PROJECT_ID")
# Full service account JSON in one variable, or a path to the key file.
FIREBASE_SERVICE_ACCOUNT = os.environ.get("FIREBASE_SERVICE_ACCOUNT")
FIREBASE_CREDENTIALS_PATH = os.environ.get("FIREBASE_CREDENTIALS_PATH")

TIMEZONE = os.environ.get("TIMEZONE", "Asia/Kolkata")
BATCH_CAPACITY = int(os.environ.get("BATCH_CAPACITY", "450"))
LOOKBACK_MONTHS = int(os.environ.get("LOOKBACK_MONTHS", "6"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

STORE_BACKEND = "memory"
TIMEZONE = "Asia/Kolkata"
BATCH_CAPACITY = 450
LOOKBACK_MONTHS = 6

DEBUG = False
TESTING = True
LOG_LEVEL = "INFO"

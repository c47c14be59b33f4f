import os

from config.config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = Config.db_config()
LOCAL_DB_PATH = Config.LOCAL_DB_PATH

NETWORK_TIMEOUT_SECONDS = Config.NETWORK_TIMEOUT_SECONDS
SYNC_INTERVAL_SECONDS = Config.SYNC_INTERVAL_SECONDS

REQUIRE_DOUBLE_VERIFICATION = Config.REQUIRE_DOUBLE_VERIFICATION
ALLOW_EXIT_WITHOUT_ENTRY = Config.ALLOW_EXIT_WITHOUT_ENTRY
EXIT_ONLY_COUNTS_AS_MARKED = Config.EXIT_ONLY_COUNTS_AS_MARKED
LOW_ATTENDANCE_THRESHOLD = Config.LOW_ATTENDANCE_THRESHOLD
TEACHER_ID = Config.TEACHER_ID

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_DIR = Config.LOG_DIR

# Local schema is created on startup; the remote schema only when AUTO_INIT_DB=1
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
# Optional: seed the demo roster into an empty local store
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))

import os
import tempfile

from config.config import Config

SECRET_KEY = "test-secret"

DB_CONFIG = {
    **Config.db_config(),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
    "connection_timeout": 2,
}
LOCAL_DB_PATH = os.getenv("LOCAL_DB_PATH", os.path.join(tempfile.gettempdir(), "school_attendance_test.sqlite3"))

NETWORK_TIMEOUT_SECONDS = 2
SYNC_INTERVAL_SECONDS = 1

REQUIRE_DOUBLE_VERIFICATION = True
ALLOW_EXIT_WITHOUT_ENTRY = True
EXIT_ONLY_COUNTS_AS_MARKED = False
LOW_ATTENDANCE_THRESHOLD = 75
TEACHER_ID = None

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
LOG_DIR = None

AUTO_INIT_DB = False
AUTO_SEED_DB = False

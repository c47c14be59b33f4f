import os

from config.config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = Config.db_config()
LOCAL_DB_PATH = Config.LOCAL_DB_PATH

NETWORK_TIMEOUT_SECONDS = Config.NETWORK_TIMEOUT_SECONDS
SYNC_INTERVAL_SECONDS = Config.SYNC_INTERVAL_SECONDS

REQUIRE_DOUBLE_VERIFICATION = Config.REQUIRE_DOUBLE_VERIFICATION
ALLOW_EXIT_WITHOUT_ENTRY = Config.ALLOW_EXIT_WITHOUT_ENTRY
EXIT_ONLY_COUNTS_AS_MARKED = Config.EXIT_ONLY_COUNTS_AS_MARKED
LOW_ATTENDANCE_THRESHOLD = Config.LOW_ATTENDANCE_THRESHOLD
TEACHER_ID = Config.TEACHER_ID

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
LOG_DIR = Config.LOG_DIR

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

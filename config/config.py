import os


class Config:
    """Settings shared by every environment, read from the process environment."""

    # Remote attendance store
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "school_attendance")

    # Remote calls give up after this many seconds and surface as NetworkError
    NETWORK_TIMEOUT_SECONDS = int(os.environ.get("NETWORK_TIMEOUT_SECONDS", "10"))
    SYNC_INTERVAL_SECONDS = int(os.environ.get("SYNC_INTERVAL_SECONDS", "30"))

    # On-device store
    LOCAL_DB_PATH = os.environ.get("LOCAL_DB_PATH", os.path.join("instance", "attendance.sqlite3"))

    # Scan policy
    REQUIRE_DOUBLE_VERIFICATION = bool(int(os.environ.get("REQUIRE_DOUBLE_VERIFICATION", "1")))
    ALLOW_EXIT_WITHOUT_ENTRY = bool(int(os.environ.get("ALLOW_EXIT_WITHOUT_ENTRY", "1")))
    EXIT_ONLY_COUNTS_AS_MARKED = bool(int(os.environ.get("EXIT_ONLY_COUNTS_AS_MARKED", "0")))

    LOW_ATTENDANCE_THRESHOLD = int(os.environ.get("LOW_ATTENDANCE_THRESHOLD", "75"))

    # Device owner; empty means the roster is shared (local-only mode)
    TEACHER_ID = os.environ.get("TEACHER_ID") or None

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_DIR = os.environ.get("LOG_DIR", "logs")

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
            "connection_timeout": cls.NETWORK_TIMEOUT_SECONDS,
        }

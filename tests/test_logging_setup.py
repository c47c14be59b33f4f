from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from school_attendance.common.logging_setup import LOGGER_NAME, configure_logging
from school_attendance.core.exceptions import AlreadyMarked


@pytest.fixture
def fresh_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = list(logger.handlers), logger.level, getattr(logger, "_school_attendance_configured", False)
    logger.handlers = []
    logger._school_attendance_configured = False
    yield logger
    for h in logger.handlers:
        h.close()
    logger.handlers, logger.level, logger._school_attendance_configured = saved


def test_configure_logging_adds_rotating_file_once(fresh_logger, tmp_path):
    configure_logging("debug", str(tmp_path / "logs"))
    configure_logging("debug", str(tmp_path / "logs"))

    file_handlers = [h for h in fresh_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(fresh_logger.handlers) == 2
    assert len(file_handlers) == 1
    assert file_handlers[0].maxBytes == 5 * 1024 * 1024
    assert fresh_logger.level == logging.DEBUG


def test_mutations_are_logged_at_info(fresh_logger, seeded_db, fixed_now, caplog):
    from school_attendance.attendance.service import AttendanceService
    from school_attendance.attendance.sqlite_attendance_repository import SQLiteAttendanceRepository
    from school_attendance.students.sqlite_student_repository import SQLiteStudentRepository

    svc = AttendanceService(SQLiteAttendanceRepository(seeded_db), SQLiteStudentRepository(seeded_db))

    with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
        svc.record_scan("1", "entry", "present", now=fixed_now)
        with pytest.raises(AlreadyMarked):
            svc.record_scan("1", "entry", "present", now=fixed_now)

    accepted = [r for r in caplog.records if r.levelno == logging.INFO and "Scan recorded" in r.getMessage()]
    rejected = [r for r in caplog.records if "Scan rejected" in r.getMessage()]
    assert len(accepted) == 1
    assert "unmarked -> entry-only" in accepted[0].getMessage()
    assert rejected and rejected[0].levelno == logging.DEBUG

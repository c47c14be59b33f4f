from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import ScanStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policy import ScanPolicy
from .attendance.repository import RemoteAttendanceStore
from .attendance.service import AttendanceService
from .attendance.sqlite_attendance_repository import SQLiteAttendanceRepository
from .common.datetime_utils import AttendanceClock
from .core.constants import DEFAULT_SYNC_INTERVAL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .database.sqlite_base import LocalDatabase
from .reports.service import AttendanceReportService
from .students.sqlite_student_repository import SQLiteStudentRepository
from .sync.connectivity import RemoteProbe
from .sync.coordinator import SyncCoordinator


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    local_db: LocalDatabase
    clock: AttendanceClock
    policy: ScanPolicy

    students_repo: SQLiteStudentRepository
    attendance_repo: SQLiteAttendanceRepository
    remote_store: RemoteAttendanceStore

    attendance_service: AttendanceService
    report_service: AttendanceReportService
    sync_coordinator: SyncCoordinator


def build_container(
    *,
    db_config: dict,
    local_db_path: str,
    policy: ScanPolicy | None = None,
    teacher_id: Optional[str] = None,
    sync_interval_seconds: float = DEFAULT_SYNC_INTERVAL_SECONDS,
    remote_store: RemoteAttendanceStore | None = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    local_db = LocalDatabase(local_db_path)
    clock = AttendanceClock()
    policy = policy or ScanPolicy()

    students_repo = SQLiteStudentRepository(local_db)
    attendance_repo = SQLiteAttendanceRepository(local_db)
    remote_store = remote_store or MySQLAttendanceRepository(conn)

    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        policy=policy,
        strategy_factory=ScanStrategyFactory(),
        clock=clock,
    )
    report_service = AttendanceReportService(attendance_repo, students_repo)
    sync_coordinator = SyncCoordinator(
        attendance_repo,
        remote_store,
        roster=students_repo,
        clock=clock,
        probe=RemoteProbe(remote_store),
        teacher_id=teacher_id,
        interval_seconds=sync_interval_seconds,
    )

    return Container(
        conn=conn,
        local_db=local_db,
        clock=clock,
        policy=policy,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        remote_store=remote_store,
        attendance_service=attendance_service,
        report_service=report_service,
        sync_coordinator=sync_coordinator,
    )

"""Sync Coordinator.

Drains unacknowledged local attendance events to the remote store. Delivery is
at-least-once: a batch is acknowledged only after the remote commit, and the
remote upsert is keyed by (student, date) so a resent batch changes nothing.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendanceEvent
from ..attendance.repository import AttendanceRepository, RemoteAttendanceStore
from ..common.datetime_utils import AttendanceClock, date_key, now_local
from ..core.constants import DEFAULT_SYNC_INTERVAL_SECONDS
from ..core.exceptions import NetworkError, ValidationError
from ..students.repository import RosterSnapshotRepository
from .connectivity import RemoteProbe
from .model import SyncResult, SyncStatus

logger = logging.getLogger(__name__)


class SyncCoordinator:
    def __init__(
        self,
        local: AttendanceRepository,
        remote: RemoteAttendanceStore,
        *,
        roster: RosterSnapshotRepository | None = None,
        clock: AttendanceClock | None = None,
        probe: RemoteProbe | None = None,
        teacher_id: Optional[str] = None,
        interval_seconds: float = DEFAULT_SYNC_INTERVAL_SECONDS,
        online: bool = False,
        time_source: Callable[[], datetime] = now_local,
    ):
        self._local = local
        self._remote = remote
        self._roster = roster
        self._clock = clock
        self._probe = probe
        self._teacher_id = teacher_id
        self._interval = float(interval_seconds)
        self._time_source = time_source

        self._online = bool(online)
        self._last_sync_time: Optional[datetime] = None
        self._last_error: Optional[str] = None

        self._state_lock = threading.Lock()
        self._pass_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_online(self) -> bool:
        with self._state_lock:
            return self._online

    @property
    def is_syncing(self) -> bool:
        return self._pass_lock.locked()

    def set_online(self, online: bool) -> Optional[SyncResult]:
        """Connectivity signal. Going online triggers a pass immediately."""

        with self._state_lock:
            was_online = self._online
            self._online = bool(online)

        if was_online == bool(online):
            return None
        if online:
            logger.info("Connectivity restored; starting sync")
            return self.sync_now()
        logger.info("Connectivity lost; new attendance will queue locally")
        return None

    def sync_now(self) -> SyncResult:
        if not self.is_online:
            return SyncResult(skipped=True, reason="offline", remaining=self._local.count_unacknowledged())

        if not self._pass_lock.acquire(blocking=False):
            logger.debug("Sync pass already in flight; skipping")
            return SyncResult(skipped=True, reason="in_progress")
        try:
            return self._run_pass()
        finally:
            self._pass_lock.release()

    def _run_pass(self) -> SyncResult:
        pending = list(self._local.query_unacknowledged())
        if not pending:
            self._after_success(remaining=0)
            return SyncResult()

        rejected: list[str] = []
        error: Optional[str] = None
        try:
            self._remote.push_events(pending)
            pushed = pending
        except NetworkError as e:
            self._set_error(str(e))
            logger.warning("Sync pass failed (%d pending), will retry: %s", len(pending), e)
            return SyncResult(error=str(e), remaining=len(pending))
        except ValidationError as e:
            logger.warning("Remote store rejected the batch (%s); pushing records one by one", e)
            pushed, rejected, network_error = self._push_individually(pending)
            if network_error is not None:
                error = str(network_error)
                self._set_error(error)
                logger.warning("Sync pass interrupted, will retry: %s", network_error)

        try:
            acknowledged = self._local.mark_acknowledged(
                [e.event_id for e in pushed],
                revisions={e.event_id: e.revision for e in pushed},
            )
        except Exception as e:
            self._set_error(str(e))
            logger.exception("Could not acknowledge %d pushed records; they will be resent", len(pushed))
            return SyncResult(pushed=len(pushed), error=str(e), remaining=len(pending))

        remaining = self._local.count_unacknowledged()
        if rejected and error is None:
            error = f"{len(rejected)} record(s) rejected by the remote store"
            self._set_error(error)
        elif error is None:
            self._after_success(remaining=remaining)

        logger.info(
            "Sync pass pushed=%d acknowledged=%d remaining=%d",
            len(pushed),
            acknowledged,
            remaining,
        )
        return SyncResult(
            pushed=len(pushed),
            acknowledged=acknowledged,
            remaining=remaining,
            error=error,
            rejected=tuple(rejected),
        )

    def _push_individually(
        self, pending: Sequence[AttendanceEvent]
    ) -> tuple[list[AttendanceEvent], list[str], Optional[NetworkError]]:
        pushed: list[AttendanceEvent] = []
        rejected: list[str] = []
        for e in pending:
            key = f"{e.student_id}@{date_key(e.event_date)}"
            try:
                self._remote.push_events([e])
            except ValidationError as err:
                logger.error("Remote store rejected %s: %s", key, err)
                rejected.append(key)
                continue
            except NetworkError as err:
                return pushed, rejected, err
            pushed.append(e)
        return pushed, rejected, None

    def _after_success(self, *, remaining: int) -> None:
        with self._state_lock:
            self._last_sync_time = self._time_source()
            self._last_error = None

        if self._clock is not None:
            try:
                self._clock.observe_server_time(self._remote.server_now())
            except NetworkError as e:
                logger.debug("Server time unavailable: %s", e)

        if remaining == 0:
            self.pull_roster()

    def _set_error(self, message: str) -> None:
        with self._state_lock:
            self._last_error = message

    def pull_roster(self) -> Optional[int]:
        """Refresh the local roster snapshot (and its counters) from the server.

        Skipped while unacknowledged events exist, since local counters already
        include changes the server has not seen yet.
        """

        if self._roster is None:
            return None
        try:
            students = self._remote.list_students(self._teacher_id)
        except NetworkError as e:
            logger.warning("Roster refresh failed, will retry: %s", e)
            return None

        replaced = self._roster.replace_roster(students, teacher_id=self._teacher_id, only_if_drained=True)
        if replaced is None:
            logger.debug("Roster refresh skipped: local queue not drained")
        else:
            logger.info("Roster refreshed (%d students)", replaced)
        return replaced

    def status(self) -> SyncStatus:
        with self._state_lock:
            online, last_sync_time, last_error = self._online, self._last_sync_time, self._last_error
        return SyncStatus(
            is_online=online,
            is_syncing=self.is_syncing,
            unacknowledged_count=self._local.count_unacknowledged(),
            last_sync_time=last_sync_time,
            last_error=last_error,
        )

    def tick(self) -> Optional[SyncResult]:
        """One periodic check: refresh connectivity, then drain if anything is queued."""

        if self._probe is not None:
            result = self.set_online(self._probe.check())
            if result is not None:
                return result
        if self.is_online and self._local.count_unacknowledged() > 0:
            return self.sync_now()
        return None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="attendance-sync", daemon=True)
        self._thread.start()
        logger.info("Sync coordinator started (interval=%ss)", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Sync coordinator stopped")

    def _run(self) -> None:
        while True:
            try:
                self.tick()
            except Exception:
                logger.exception("Sync tick failed")
            if self._stop_event.wait(self._interval):
                return

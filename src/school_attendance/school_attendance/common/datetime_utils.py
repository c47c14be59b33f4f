from __future__ import annotations

import threading
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from ..core.constants import DATE_KEY_FORMAT


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DATE_KEY_FORMAT).date()


def date_key(value: date) -> str:
    return value.strftime(DATE_KEY_FORMAT)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


class AttendanceClock:
    """Source of "now" and "today" for attendance date keys.

    Starts on device-local time. Each time the remote server time is observed
    (after a successful sync pass) the offset to it is kept, so date keys follow
    the server while online. Offline, the last known offset is reused; a device
    with a bad clock that has never synced will key records by its own date.
    """

    def __init__(self, source: Optional[Callable[[], datetime]] = None):
        self._source = source or now_local
        self._offset = timedelta(0)
        self._lock = threading.Lock()

    @property
    def offset(self) -> timedelta:
        with self._lock:
            return self._offset

    def observe_server_time(self, server_now: datetime) -> None:
        with self._lock:
            self._offset = server_now - self._source()

    def now(self) -> datetime:
        return self._source() + self.offset

    def today(self, now: Optional[datetime] = None) -> date:
        return (now or self.now()).date()

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional


class LocalDatabase:
    """On-device SQLite file holding the roster snapshot and attendance events.

    A short-lived connection is opened per operation; SQLite's file locking
    serializes the UI thread and the sync thread.
    """

    def __init__(self, path: str | Path, *, timeout: float = 5.0):
        self._path = str(path)
        self._timeout = float(timeout)

    @property
    def path(self) -> str:
        return self._path

    def connect(self) -> sqlite3.Connection:
        Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path, timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn


@contextmanager
def local_cursor(db: LocalDatabase, *, immediate: bool = False):
    """One local transaction. `immediate` takes the write lock up front so a
    read-modify-write cannot interleave with another writer."""

    conn = db.connect()
    try:
        if immediate:
            conn.execute("BEGIN IMMEDIATE")
        cur = conn.cursor()
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def row_to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    return dict(row) if row is not None else None


def rows_to_dicts(rows) -> List[Dict[str, Any]]:
    return [dict(r) for r in rows or []]

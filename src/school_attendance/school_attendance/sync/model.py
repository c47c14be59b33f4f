from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one sync pass.

    skipped passes carry a reason ("offline" or "in_progress") and touch nothing.
    rejected lists student/date keys the remote store refused; they stay queued.
    """

    pushed: int = 0
    acknowledged: int = 0
    remaining: int = 0
    skipped: bool = False
    reason: Optional[str] = None
    error: Optional[str] = None
    rejected: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.skipped and self.error is None

    def as_dict(self) -> dict:
        return {
            "ok": self.ok,
            "pushed": self.pushed,
            "acknowledged": self.acknowledged,
            "remaining": self.remaining,
            "skipped": self.skipped,
            "reason": self.reason,
            "error": self.error,
            "rejected": list(self.rejected),
        }


@dataclass(frozen=True)
class SyncStatus:
    is_online: bool
    is_syncing: bool
    unacknowledged_count: int
    last_sync_time: Optional[datetime] = None
    last_error: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "isOnline": self.is_online,
            "isSyncing": self.is_syncing,
            "unacknowledgedCount": self.unacknowledged_count,
            "lastSyncTime": self.last_sync_time.isoformat() if self.last_sync_time else None,
            "lastError": self.last_error,
        }

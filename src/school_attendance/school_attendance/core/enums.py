from __future__ import annotations

from enum import Enum


class Outcome(str, Enum):
    """Stored ground-truth outcome of a (student, date) record."""

    ABSENT = "absent"
    ENTRY_ONLY = "entry-only"
    EXIT_ONLY = "exit-only"
    COMPLETE = "complete"


class DerivedStatus(str, Enum):
    """Status computed for display/aggregation; never persisted."""

    UNMARKED = "unmarked"
    ENTRY_ONLY = "entry-only"
    EXIT_ONLY = "exit-only"
    COMPLETE = "complete"
    ABSENT = "absent"


class ScanKind(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


class MarkOutcome(str, Enum):
    """What the teacher asked for: present or absent."""

    PRESENT = "present"
    ABSENT = "absent"


PRESENT_OUTCOMES = frozenset({Outcome.ENTRY_ONLY, Outcome.EXIT_ONLY, Outcome.COMPLETE})
PRESENT_STATUSES = frozenset({DerivedStatus.ENTRY_ONLY, DerivedStatus.EXIT_ONLY, DerivedStatus.COMPLETE})

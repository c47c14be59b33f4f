"""Attendance status engine.

Pure functions: no I/O, no clock. They map stored records to the five-way
derived status, roll a roster up into counts, and compute how the student
counters move when a record's outcome changes.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from ..core.enums import PRESENT_OUTCOMES, DerivedStatus, Outcome
from ..students.model import CounterDelta, Student
from .model import AttendanceEvent, AttendanceStats


def derive_status(event: Optional[AttendanceEvent]) -> DerivedStatus:
    if event is None:
        return DerivedStatus.UNMARKED
    if event.outcome == Outcome.ABSENT:
        return DerivedStatus.ABSENT

    has_entry = event.entry_time is not None
    has_exit = event.exit_time is not None
    if event.outcome == Outcome.COMPLETE or (has_entry and has_exit):
        return DerivedStatus.COMPLETE
    if has_entry:
        return DerivedStatus.ENTRY_ONLY
    if has_exit:
        return DerivedStatus.EXIT_ONLY
    return DerivedStatus.UNMARKED


def aggregate(
    roster: Iterable[Student],
    events: Mapping[str, AttendanceEvent],
    *,
    exit_only_counts_as_marked: bool = False,
) -> AttendanceStats:
    """Count statuses over a roster. events is keyed by student_id.

    By default not_marked = total - complete - entry_only - absent, which folds
    exit-only students into not_marked. With exit_only_counts_as_marked they are
    subtracted as well.
    """

    total = complete = entry_only = exit_only = absent = 0
    for student in roster:
        total += 1
        status = derive_status(events.get(student.student_id))
        if status == DerivedStatus.COMPLETE:
            complete += 1
        elif status == DerivedStatus.ENTRY_ONLY:
            entry_only += 1
        elif status == DerivedStatus.EXIT_ONLY:
            exit_only += 1
        elif status == DerivedStatus.ABSENT:
            absent += 1

    not_marked = total - complete - entry_only - absent
    if exit_only_counts_as_marked:
        not_marked -= exit_only

    return AttendanceStats(
        total=total,
        complete=complete,
        entry_only=entry_only,
        exit_only=exit_only,
        absent=absent,
        not_marked=not_marked,
    )


def counter_delta(previous: Optional[Outcome], new: Outcome) -> CounterDelta:
    """Counter movement for a record going from `previous` to `new`.

    A new record touches total once; afterwards only a flip between the present
    and absent classes moves present/absent. Re-applying the same outcome is a
    zero delta, which is what makes remote upserts idempotent.
    """

    new_present = new in PRESENT_OUTCOMES
    if previous is None:
        return CounterDelta(present=1, total=1) if new_present else CounterDelta(absent=1, total=1)

    old_present = previous in PRESENT_OUTCOMES
    if old_present == new_present:
        return CounterDelta()
    if new_present:
        return CounterDelta(present=1, absent=-1)
    return CounterDelta(present=-1, absent=1)

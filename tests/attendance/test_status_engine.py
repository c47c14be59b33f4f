from __future__ import annotations

from datetime import date, datetime

import pytest

from school_attendance.attendance.model import AttendanceEvent
from school_attendance.attendance.status import aggregate, counter_delta, derive_status
from school_attendance.core.enums import DerivedStatus, Outcome
from school_attendance.students.model import CounterDelta, Student

DAY = date(2025, 3, 10)
T_IN = datetime(2025, 3, 10, 8, 0)
T_OUT = datetime(2025, 3, 10, 14, 0)


def _event(outcome: Outcome, entry=None, exit=None, student_id="1") -> AttendanceEvent:
    return AttendanceEvent(student_id=student_id, event_date=DAY, outcome=outcome, entry_time=entry, exit_time=exit)


def _roster(n: int) -> list[Student]:
    return [Student(student_id=str(i), name=f"S{i}", roll_number=str(i)) for i in range(1, n + 1)]


@pytest.mark.parametrize(
    "event, expected",
    [
        (None, DerivedStatus.UNMARKED),
        (_event(Outcome.ABSENT), DerivedStatus.ABSENT),
        (_event(Outcome.ENTRY_ONLY, entry=T_IN), DerivedStatus.ENTRY_ONLY),
        (_event(Outcome.EXIT_ONLY, exit=T_OUT), DerivedStatus.EXIT_ONLY),
        (_event(Outcome.COMPLETE, entry=T_IN, exit=T_OUT), DerivedStatus.COMPLETE),
        # Both timestamps set wins over a stale stored outcome.
        (_event(Outcome.ENTRY_ONLY, entry=T_IN, exit=T_OUT), DerivedStatus.COMPLETE),
        # Present-class outcome with no timestamps at all.
        (_event(Outcome.ENTRY_ONLY), DerivedStatus.UNMARKED),
    ],
)
def test_derive_status_covers_every_state(event, expected):
    assert derive_status(event) == expected


def test_complete_outcome_iff_both_timestamps_for_consistent_events():
    assert _event(Outcome.COMPLETE, entry=T_IN, exit=T_OUT).is_consistent()
    assert not _event(Outcome.COMPLETE, entry=T_IN).is_consistent()
    assert not _event(Outcome.ENTRY_ONLY, entry=T_IN, exit=T_OUT).is_consistent()
    assert not _event(Outcome.ABSENT, entry=T_IN).is_consistent()
    assert _event(Outcome.EXIT_ONLY, exit=T_OUT).is_consistent()


def test_aggregate_ten_student_roster():
    roster = _roster(10)
    events = {}
    for sid in ("1", "2", "3"):
        events[sid] = _event(Outcome.COMPLETE, entry=T_IN, exit=T_OUT, student_id=sid)
    for sid in ("4", "5"):
        events[sid] = _event(Outcome.ENTRY_ONLY, entry=T_IN, student_id=sid)
    events["6"] = _event(Outcome.ABSENT, student_id="6")

    stats = aggregate(roster, events)

    assert stats.as_dict() == {
        "total": 10,
        "complete": 3,
        "entryOnly": 2,
        "exitOnly": 0,
        "absent": 1,
        "notMarked": 4,
    }


def test_aggregate_folds_exit_only_into_not_marked_by_default():
    roster = _roster(3)
    events = {
        "1": _event(Outcome.EXIT_ONLY, exit=T_OUT, student_id="1"),
        "2": _event(Outcome.COMPLETE, entry=T_IN, exit=T_OUT, student_id="2"),
    }

    stats = aggregate(roster, events)

    assert stats.exit_only == 1
    assert stats.not_marked == 2


def test_aggregate_can_count_exit_only_as_marked():
    roster = _roster(3)
    events = {
        "1": _event(Outcome.EXIT_ONLY, exit=T_OUT, student_id="1"),
        "2": _event(Outcome.COMPLETE, entry=T_IN, exit=T_OUT, student_id="2"),
    }

    stats = aggregate(roster, events, exit_only_counts_as_marked=True)

    assert stats.exit_only == 1
    assert stats.not_marked == 1


def test_aggregate_ignores_events_for_students_off_the_roster():
    stats = aggregate(_roster(1), {"99": _event(Outcome.ABSENT, student_id="99")})
    assert stats.total == 1
    assert stats.absent == 0
    assert stats.not_marked == 1


@pytest.mark.parametrize(
    "previous, new, expected",
    [
        (None, Outcome.ENTRY_ONLY, CounterDelta(present=1, total=1)),
        (None, Outcome.EXIT_ONLY, CounterDelta(present=1, total=1)),
        (None, Outcome.ABSENT, CounterDelta(absent=1, total=1)),
        (Outcome.ENTRY_ONLY, Outcome.COMPLETE, CounterDelta()),
        (Outcome.COMPLETE, Outcome.COMPLETE, CounterDelta()),
        (Outcome.ABSENT, Outcome.ENTRY_ONLY, CounterDelta(present=1, absent=-1)),
        (Outcome.COMPLETE, Outcome.ABSENT, CounterDelta(present=-1, absent=1)),
    ],
)
def test_counter_delta(previous, new, expected):
    assert counter_delta(previous, new) == expected

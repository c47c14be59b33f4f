from datetime import date, datetime

import pytest

from school_attendance.attendance.factory import ScanStrategyFactory
from school_attendance.attendance.model import AttendanceEvent
from school_attendance.attendance.policy import ScanPolicy
from school_attendance.attendance.status import derive_status
from school_attendance.attendance.strategies.entry_strategy import EntryScanStrategy
from school_attendance.attendance.strategies.exit_strategy import ExitScanStrategy
from school_attendance.attendance.strategies.single_tap_strategy import SingleTapStrategy
from school_attendance.core.enums import MarkOutcome, Outcome, ScanKind
from school_attendance.core.exceptions import AlreadyMarked, EntryRequired, InvalidTransition

NOW = datetime(2025, 1, 1, 8, 5, 0)
EARLIER = datetime(2025, 1, 1, 7, 55, 0)


def _decide(strategy, current, outcome, policy=ScanPolicy()):
    return strategy.decide(
        student_id="1",
        current=current,
        status=derive_status(current),
        outcome=outcome,
        now=NOW,
        policy=policy,
    )


def _event(outcome, entry=None, exit=None):
    return AttendanceEvent(student_id="1", event_date=date(2025, 1, 1), outcome=outcome, entry_time=entry, exit_time=exit)


def test_factory_picks_strategy_by_kind_under_double_verification():
    factory = ScanStrategyFactory()
    policy = ScanPolicy(require_double_verification=True)

    assert isinstance(factory.for_scan(kind=ScanKind.ENTRY, policy=policy), EntryScanStrategy)
    assert isinstance(factory.for_scan(kind=ScanKind.EXIT, policy=policy), ExitScanStrategy)


def test_factory_single_tap_ignores_kind():
    factory = ScanStrategyFactory()
    policy = ScanPolicy(require_double_verification=False)

    assert isinstance(factory.for_scan(kind=ScanKind.ENTRY, policy=policy), SingleTapStrategy)
    assert isinstance(factory.for_scan(kind=ScanKind.EXIT, policy=policy), SingleTapStrategy)


def test_entry_on_unmarked_sets_entry_timestamp():
    decision = _decide(EntryScanStrategy(), None, MarkOutcome.PRESENT)
    assert decision.outcome == Outcome.ENTRY_ONLY
    assert decision.entry_time == NOW
    assert decision.exit_time is None


def test_entry_after_exit_completes_and_keeps_exit_time():
    decision = _decide(EntryScanStrategy(), _event(Outcome.EXIT_ONLY, exit=EARLIER), MarkOutcome.PRESENT)
    assert decision.outcome == Outcome.COMPLETE
    assert decision.entry_time == NOW
    assert decision.exit_time == EARLIER


def test_second_entry_is_already_marked():
    with pytest.raises(AlreadyMarked, match="Entry already marked"):
        _decide(EntryScanStrategy(), _event(Outcome.ENTRY_ONLY, entry=EARLIER), MarkOutcome.PRESENT)


def test_exit_after_entry_completes():
    decision = _decide(ExitScanStrategy(), _event(Outcome.ENTRY_ONLY, entry=EARLIER), MarkOutcome.PRESENT)
    assert decision.outcome == Outcome.COMPLETE
    assert decision.entry_time == EARLIER
    assert decision.exit_time == NOW


def test_absent_exit_after_entry_is_invalid():
    with pytest.raises(InvalidTransition):
        _decide(ExitScanStrategy(), _event(Outcome.ENTRY_ONLY, entry=EARLIER), MarkOutcome.ABSENT)


def test_exit_without_entry_depends_on_policy():
    allowed = _decide(ExitScanStrategy(), None, MarkOutcome.PRESENT, ScanPolicy(allow_exit_without_entry=True))
    assert allowed.outcome == Outcome.EXIT_ONLY
    assert allowed.exit_time == NOW

    with pytest.raises(EntryRequired, match="Entry must be marked before exit"):
        _decide(ExitScanStrategy(), None, MarkOutcome.PRESENT, ScanPolicy(allow_exit_without_entry=False))


@pytest.mark.parametrize("strategy", [EntryScanStrategy(), ExitScanStrategy(), SingleTapStrategy()])
def test_terminal_states_reject_every_scan(strategy):
    complete = _event(Outcome.COMPLETE, entry=EARLIER, exit=NOW)
    absent = _event(Outcome.ABSENT)

    with pytest.raises(AlreadyMarked, match="already complete"):
        _decide(strategy, complete, MarkOutcome.PRESENT)
    with pytest.raises(AlreadyMarked, match="use edit"):
        _decide(strategy, absent, MarkOutcome.PRESENT)


def test_single_tap_completes_with_both_timestamps():
    decision = _decide(SingleTapStrategy(), None, MarkOutcome.PRESENT, ScanPolicy(require_double_verification=False))
    assert decision.outcome == Outcome.COMPLETE
    assert decision.entry_time == NOW
    assert decision.exit_time == NOW


def test_single_tap_finishes_half_done_record():
    decision = _decide(SingleTapStrategy(), _event(Outcome.ENTRY_ONLY, entry=EARLIER), MarkOutcome.PRESENT)
    assert decision.outcome == Outcome.COMPLETE
    assert decision.entry_time == EARLIER
    assert decision.exit_time == NOW

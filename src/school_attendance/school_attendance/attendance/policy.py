from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScanPolicy:
    """Deployment switches for the scan state machine.

    require_double_verification: a day is Complete only after entry and exit
        scans. When off (single-tap), one Present scan completes the day.
    allow_exit_without_entry: accept an exit scan on an unmarked day (ExitOnly).
        When off, such a scan raises EntryRequired.
    exit_only_counts_as_marked: exclude ExitOnly students from not_marked.
    """

    require_double_verification: bool = True
    allow_exit_without_entry: bool = True
    exit_only_counts_as_marked: bool = False

    @classmethod
    def from_settings(cls, settings) -> "ScanPolicy":
        return cls(
            require_double_verification=bool(getattr(settings, "REQUIRE_DOUBLE_VERIFICATION", True)),
            allow_exit_without_entry=bool(getattr(settings, "ALLOW_EXIT_WITHOUT_ENTRY", True)),
            exit_only_counts_as_marked=bool(getattr(settings, "EXIT_ONLY_COUNTS_AS_MARKED", False)),
        )

from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import ScanKind
from .policy import ScanPolicy
from .strategies.base import ScanStrategy
from .strategies.entry_strategy import EntryScanStrategy
from .strategies.exit_strategy import ExitScanStrategy
from .strategies.single_tap_strategy import SingleTapStrategy


@dataclass
class ScanStrategyFactory:
    """Factory Pattern: choose the transition rules for a scan."""

    def for_scan(self, *, kind: ScanKind, policy: ScanPolicy) -> ScanStrategy:
        if not policy.require_double_verification:
            return SingleTapStrategy()
        if kind == ScanKind.EXIT:
            return ExitScanStrategy()
        return EntryScanStrategy()

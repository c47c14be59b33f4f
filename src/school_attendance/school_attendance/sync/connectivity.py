from __future__ import annotations

import logging

from ..attendance.repository import RemoteAttendanceStore
from ..core.exceptions import NetworkError

logger = logging.getLogger(__name__)


class RemoteProbe:
    """Connectivity check against the remote store itself.

    A reachable network with an unreachable database is still offline for sync.
    """

    def __init__(self, remote: RemoteAttendanceStore):
        self._remote = remote

    def check(self) -> bool:
        try:
            return bool(self._remote.ping())
        except NetworkError as e:
            logger.debug("Remote probe failed: %s", e)
            return False

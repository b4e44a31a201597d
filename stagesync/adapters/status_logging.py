from __future__ import annotations

import logging
from typing import Callable, Optional

from stagesync.domain.entities import ConnectionStatus
from stagesync.domain.ports import StatusSink

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LoggingStatusSink(StatusSink):
    """Status sink that writes to ``logging`` and remembers only the last status."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        on_status: Optional[Callable[[ConnectionStatus], None]] = None,
    ) -> None:
        self._log = logger or logging.getLogger("stagesync.session")
        self._on_status = on_status
        self.status: Optional[ConnectionStatus] = None

    def update_status(self, status: ConnectionStatus) -> None:
        status = ConnectionStatus(status)
        if status != self.status:
            self._log.debug("status %s -> %s", self.status, status)
        self.status = status
        if self._on_status is not None:
            self._on_status(status)

    def log(self, level: str, message: str) -> None:
        self._log.log(_LEVELS.get(str(level).lower(), logging.INFO), message)


__all__ = ["LoggingStatusSink"]

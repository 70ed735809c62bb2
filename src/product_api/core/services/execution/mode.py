"""Runtime switch between the delayed (async-simulated) and immediate paths."""

import threading

from loguru import logger
from pydantic import BaseModel


class ModeStatus(BaseModel):
    """Wire representation of the execution mode."""

    enabled: bool


class ExecutionModeManager:
    """Thread-safe holder for the process-wide execution mode flag.

    When enabled, service operations take the delayed path: a simulated I/O
    wait followed by dispatch to a worker thread. When disabled they run
    inline with no added latency.

    One instance is created per application and injected where needed.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._lock = threading.Lock()
        self._enabled = enabled

    @property
    def is_enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def enable(self) -> ModeStatus:
        with self._lock:
            self._enabled = True
        logger.info("Async execution ENABLED")
        return self.status()

    def disable(self) -> ModeStatus:
        with self._lock:
            self._enabled = False
        logger.info("Async execution DISABLED")
        return self.status()

    def status(self) -> ModeStatus:
        return ModeStatus(enabled=self.is_enabled)

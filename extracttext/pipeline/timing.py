from __future__ import annotations

import logging
import time
from typing import Optional


class StageTimer:
    """Debug timing of extraction stages.

    Enabled timers log stage messages and elapsed seconds at DEBUG level on the
    given logger; disabled timers do nothing.
    """

    def __init__(self, enabled: bool = False, logger: Optional[logging.Logger] = None) -> None:
        self.enabled = bool(enabled)
        self.log = logger or logging.getLogger("extracttext.timing")

    def start(self, message: str) -> float:
        if self.enabled:
            self.log.debug(message)
        return time.perf_counter()

    def stop(self, message: str, started: float) -> float:
        elapsed = time.perf_counter() - started
        if self.enabled:
            self.log.debug("%s%.3f seconds", message, elapsed)
        return elapsed

    def note(self, message: str, *args) -> None:
        if self.enabled:
            self.log.debug(message, *args)

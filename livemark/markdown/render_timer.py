from __future__ import annotations

import logging
import os
import time

logger = logging.getLogger(__name__)

RENDER_LOGGING_ENABLED = os.getenv("LIVEMARK_DETAILED_RENDER_LOGGING", "0") not in (
    "0",
    "false",
    "False",
    "",
    None,
)


class RenderTimer:
    """Lightweight timing helper for parse + render steps."""

    def __init__(self, label: str) -> None:
        self.label = label
        now = time.perf_counter()
        self._start = now
        self._last = now
        self.enabled = RENDER_LOGGING_ENABLED
        if self.enabled:
            logger.debug("[Render] start %s", label)

    def mark(self, step: str) -> None:
        if not self.enabled:
            return
        now = time.perf_counter()
        step_ms = (now - self._last) * 1000.0
        total_ms = (now - self._start) * 1000.0
        logger.debug("[Render] %s %s +%.1fms total=%.1fms", self.label, step, step_ms, total_ms)
        self._last = now

    def end(self, step: str = "done") -> None:
        self.mark(step)

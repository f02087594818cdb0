"""Logging sink for traversal reporters.

The tree core reports through ``TraversalReporter``; this module adapts that
interface onto the stdlib ``logging`` package and configures CLI output.
"""

from __future__ import annotations

import logging
import sys
import threading
import time

LOGGER_NAME = "prunetree"
LOG_FORMAT = "%(levelname)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)


class LoggingReporter:
    """Reporter writing decisions, warnings, and operation timings to a logger."""

    def __init__(self, target: logging.Logger | None = None) -> None:
        self.logger = target or logger
        self._lock = threading.Lock()
        self._started: dict[str, list[float]] = {}

    def start_operation(self, label: str) -> None:
        with self._lock:
            self._started.setdefault(label, []).append(time.perf_counter())
        self.logger.debug(f"{label} started")

    def end_operation(self, label: str) -> None:
        with self._lock:
            stack = self._started.get(label)
            started = stack.pop() if stack else None
            if stack == []:
                del self._started[label]
        if started is None:
            self.logger.debug(f"{label} finished")
            return
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        self.logger.info(f"{label} finished in {elapsed_ms:.1f} ms")

    def debug(self, message: str) -> None:
        self.logger.debug(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)


def configure_logging(verbose: bool = False) -> None:
    """Send prunetree records to stderr; ``verbose`` enables debug output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


__all__ = [
    "LOGGER_NAME",
    "LoggingReporter",
    "configure_logging",
    "logger",
]

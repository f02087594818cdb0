"""Reporter interface used by tree builders for progress and diagnostics.

Builders never write to a logging sink directly; callers inject a reporter.
"""

from __future__ import annotations

from typing import Protocol


class TraversalReporter(Protocol):
    """Receives timing boundaries, decisions, and recoverable failures."""

    def start_operation(self, label: str) -> None: ...

    def end_operation(self, label: str) -> None: ...

    def debug(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...


class NullReporter:
    """Reporter that discards everything."""

    def start_operation(self, label: str) -> None:
        pass

    def end_operation(self, label: str) -> None:
        pass

    def debug(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass


NULL_REPORTER = NullReporter()


__all__ = [
    "TraversalReporter",
    "NullReporter",
    "NULL_REPORTER",
]

"""Directory listing with a per-call cache, bounded I/O pool, and deadlines.

Listings run on a fixed-size thread pool so concurrent measurement never has
more than ``io_workers`` filesystem scans in flight. A listing that fails,
times out, or targets a missing directory yields no children and is reported
as a warning; only cancellation escapes as an exception.
"""

from __future__ import annotations

import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from .reporting import NULL_REPORTER, TraversalReporter

DEFAULT_IO_WORKERS = 16
CANCEL_POLL_SECONDS = 0.05


class TraversalCancelled(Exception):
    """Raised when a traversal is aborted through its cancel event."""


@dataclass(frozen=True)
class ListedEntry:
    """One immediate directory child as seen by ``os.scandir``."""

    name: str
    is_dir: bool
    is_file: bool
    is_symlink: bool


def scan_directory(directory: str) -> tuple[ListedEntry, ...]:
    """List ``directory`` without following symlinks.

    Entries whose type cannot be determined are skipped. ``OSError`` from the
    directory itself propagates to the caller.
    """
    listed: list[ListedEntry] = []
    with os.scandir(directory) as entries:
        for child in entries:
            try:
                is_symlink = child.is_symlink()
                is_dir = (not is_symlink) and child.is_dir(follow_symlinks=False)
                is_file = (not is_symlink) and child.is_file(follow_symlinks=False)
            except OSError:
                continue
            listed.append(
                ListedEntry(
                    name=child.name,
                    is_dir=is_dir,
                    is_file=is_file,
                    is_symlink=is_symlink,
                )
            )
    listed.sort(key=lambda item: item.name)
    return tuple(listed)


class DirectoryEntryProvider:
    """Cached, deadline-aware directory lister shared by one traversal.

    Use as a context manager so the I/O pool is shut down with the call.
    """

    def __init__(
        self,
        *,
        io_workers: int = DEFAULT_IO_WORKERS,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
        reporter: TraversalReporter = NULL_REPORTER,
    ) -> None:
        if io_workers < 1:
            raise ValueError("io_workers must be >= 1")
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = timeout
        self._cancel_event = cancel_event
        self._reporter = reporter
        self._lock = threading.Lock()
        self._cache: dict[str, tuple[ListedEntry, ...]] = {}
        self._executor = ThreadPoolExecutor(max_workers=io_workers, thread_name_prefix="prunetree-io")

    def __enter__(self) -> DirectoryEntryProvider:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Stop the I/O pool, dropping queued listings.

        Does not wait: a listing stuck in the kernel (a stale network mount)
        finishes on its worker thread after the traversal has returned.
        """
        self._executor.shutdown(wait=False, cancel_futures=True)

    def clear(self) -> None:
        """Forget every cached listing."""
        with self._lock:
            self._cache.clear()

    def raise_if_cancelled(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise TraversalCancelled("traversal cancelled")

    def list_entries(self, directory: str) -> tuple[ListedEntry, ...]:
        """Return cached children of ``directory``, scanning on first use."""
        with self._lock:
            cached = self._cache.get(directory)
        if cached is not None:
            return cached

        self.raise_if_cancelled()
        try:
            entries = self._await_listing(self._executor.submit(scan_directory, directory), directory)
        except TimeoutError:
            self._reporter.warning(f"Listing timed out after {self._timeout}s: {directory}")
            entries = ()
        except OSError as exc:
            self._reporter.warning(f"Cannot read directory {directory}: {exc}")
            entries = ()

        with self._lock:
            self._cache[directory] = entries
        return entries

    def _await_listing(self, future: Future[tuple[ListedEntry, ...]], directory: str) -> tuple[ListedEntry, ...]:
        """Wait for ``future`` while honoring deadline and cancellation."""
        deadline = None if self._timeout is None else time.monotonic() + self._timeout
        while True:
            try:
                self.raise_if_cancelled()
            except TraversalCancelled:
                future.cancel()
                raise
            wait_for = CANCEL_POLL_SECONDS
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    future.cancel()
                    raise TimeoutError(directory)
                wait_for = min(wait_for, remaining)
            done, _pending = wait([future], timeout=wait_for)
            if done:
                return future.result()


__all__ = [
    "DEFAULT_IO_WORKERS",
    "TraversalCancelled",
    "ListedEntry",
    "scan_directory",
    "DirectoryEntryProvider",
]

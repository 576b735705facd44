"""Cooperative cancellation shared by the harness and signal handlers."""

from __future__ import annotations

import threading


class CancellationToken:
    """Stop and dump requests, observed by workers between trajectories.

    Both flags are ``threading.Event`` objects, so setting them from a
    signal handler on the main thread is safe.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()
        self._dump_requested = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def request_dump(self) -> None:
        self._dump_requested.set()

    def take_dump_request(self) -> bool:
        """Return True once per pending dump request."""
        if not self._dump_requested.is_set():
            return False
        self._dump_requested.clear()
        return True

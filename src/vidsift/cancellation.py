"""Cooperative cancellation shared by sampling and clustering."""

import threading


class OperationCancelled(Exception):
    """Raised when a running operation observes a cancellation request."""


class CancellationToken:
    """
    Thread-safe flag checked by long-running loops.

    Workers call ``raise_if_cancelled()`` at safe points; whoever holds the
    token calls ``cancel()`` from any thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation was cancelled")

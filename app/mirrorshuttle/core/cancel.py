"""Cooperative cancellation for long-running operations."""

import threading

from mirrorshuttle.core.errors import OperationCancelledError


class CancelToken:
    """Monotonic cancellation flag shared between the driver and the engines.

    Once cancelled, a token stays cancelled. The engines check it at every
    visited tree entry and before every chunk read during a copy.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Signal cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation was signaled."""
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if cancellation was signaled."""
        if self._event.is_set():
            raise OperationCancelledError("operation was cancelled")

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds, waking early on cancellation.

        Returns:
            True if the token was cancelled while waiting.
        """
        return self._event.wait(timeout)

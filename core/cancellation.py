"""
Cooperative cancellation for long-running tree walks.

A CancellationToken is created by the caller and passed by reference through
every call that touches storage. Operations poll it before each directory
traversal step; once it fires, they raise DiscoveryCancelledError and yield
no partial result.
"""

import threading
from typing import Optional

from core.exceptions import DiscoveryCancelledError


class CancellationToken:
    """
    Thread-safe cancellation flag.

    The token may be cancelled from another thread (e.g. a signal handler or
    a deadline timer) while discovery runs on the calling thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """
        Raise if cancellation has been requested.

        Raises:
            DiscoveryCancelledError: If cancel() has been called.
        """
        if self._event.is_set():
            raise DiscoveryCancelledError()


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise DiscoveryCancelledError if token is set and cancelled. None never cancels."""
    if token is not None:
        token.raise_if_cancelled()

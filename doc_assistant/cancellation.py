"""
Cooperative cancellation for long extraction runs and retry chains.

A CancellationToken is checked between extraction batches and before each
completion attempt. Work already in flight (a single page, a single request)
is allowed to finish; the next checkpoint raises OperationCancelledError.
"""

import logging
import threading

from doc_assistant.exceptions import OperationCancelledError


class CancellationToken:
    """Thread-safe cancellation flag shared between a caller and a running operation."""

    def __init__(self):
        self._event = threading.Event()
        self._reason = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self._reason = reason
        self._event.set()
        logging.getLogger(self.__class__.__name__).info(f"Cancellation requested: {reason}")

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, where: str = "") -> None:
        if self._event.is_set():
            suffix = f" ({where})" if where else ""
            raise OperationCancelledError(f"Operation cancelled{suffix}: {self._reason}")


def check_cancelled(token, where: str = "") -> None:
    """Raise OperationCancelledError if the optional token has been cancelled."""
    if token is not None:
        token.raise_if_cancelled(where)

"""Cooperative cancellation and progress reporting for long-running tasks."""

import asyncio
from collections.abc import Callable

ProgressCallback = Callable[[float], None]


class CancellationToken:
    """Cancellation signal polled between item-level operations."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise ``asyncio.CancelledError`` once cancellation was requested."""
        if self._event.is_set():
            raise asyncio.CancelledError("Reconciliation cancelled")


class ProgressReporter:
    """Forwards monotonically increasing progress values to a sink."""

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback
        self.value = 0.0

    def report(self, value: float) -> None:
        value = min(max(value, 0.0), 100.0)
        if value < self.value:
            return
        self.value = value
        if self._callback is not None:
            self._callback(value)

"""
Cancellation context passed into every DA operation.

A context carries an optional deadline and a cancel flag. Adapters use it
to bound outbound network calls and to interrupt retry sleeps.
"""
import threading
import time
from typing import Optional


class Context:
    """Deadline and cancellation signal for one operation."""

    def __init__(self, deadline: Optional[float] = None):
        """Initialize the context.

        Args:
            deadline: Absolute time.monotonic() value after which the
                operation should be abandoned, or None for no deadline
        """
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> "Context":
        """A context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "Context":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def done(self) -> bool:
        if self.cancelled:
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def error(self) -> str:
        """Reason the context is done, empty if it is still live."""
        if self.cancelled:
            return "context cancelled"
        if self.done():
            return "context deadline exceeded"
        return ""

    def timeout(self, default: float) -> float:
        """Timeout for the next blocking call, capped by the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return default
        return min(default, remaining)

    def wait(self, seconds: float) -> bool:
        """Sleep for up to seconds, waking early on cancellation.

        Returns:
            bool: True if the context is done when the wait ends
        """
        self._cancelled.wait(self.timeout(seconds))
        return self.done()

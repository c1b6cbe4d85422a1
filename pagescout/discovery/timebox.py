"""Overall wall-clock budget shared by the steps of one discovery call."""

import time
from typing import Optional


class Timebox:
    """Deadline checked before each new request.

    Components stop issuing requests once the budget is spent, so a
    discovery call returns whatever it has gathered so far. In-flight
    requests are still bounded by their own timeouts.
    """

    def __init__(self, seconds: Optional[float] = None):
        """Initialize timebox.

        Args:
            seconds: Budget in seconds; None means unlimited.
        """
        self.seconds = seconds
        self._deadline = time.monotonic() + seconds if seconds is not None else None

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when unlimited."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def clamp(self, timeout: float) -> float:
        """Shorten a per-request timeout so it does not outlive the budget."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return max(0.001, min(timeout, remaining))


def is_expired(timebox: Optional[Timebox]) -> bool:
    return timebox is not None and timebox.expired

"""Clock implementations."""

import time


class SystemClock:
    """Wall clock in whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """
    Clock driven by hand, for tests, demos and step-based auctions.

    Example:
        >>> clock = ManualClock(start=100)
        >>> clock.advance(30)
        130
    """

    def __init__(self, start: int = 0):
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, delta: int) -> int:
        """Move forward by `delta` units and return the new reading."""
        if delta < 0:
            raise ValueError(f"Clock cannot move backwards (delta={delta})")
        self._now += delta
        return self._now

    def set(self, value: int) -> None:
        """Jump to an absolute reading."""
        self._now = value

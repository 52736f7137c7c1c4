"""Countdown and lockout bookkeeping for timed challenges.

Time is measured in ticks of one second driven by the caller; nothing
here reads a clock.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ChallengeSession:
    def __init__(self, lockout_seconds: int = 300) -> None:
        if lockout_seconds < 0:
            raise ValueError("lockout_seconds must be non-negative")
        self.lockout_seconds = lockout_seconds
        self.time_left = 0
        self.lockout_left = 0
        self.active = False

    @property
    def locked_out(self) -> bool:
        return self.lockout_left > 0

    def start(self, time_budget: int) -> None:
        if self.active:
            raise RuntimeError("A challenge is already active")
        if self.locked_out:
            raise RuntimeError(f"New challenge available in {self.lockout_left} seconds")
        if time_budget <= 0:
            raise ValueError("time_budget must be positive")
        self.active = True
        self.time_left = time_budget
        logger.debug("Challenge started with %d seconds", time_budget)

    def stop(self) -> None:
        """End the active challenge early; the lockout still applies."""
        if not self.active:
            return
        self._end()

    def tick(self) -> bool:
        """Advance one second. True when this tick ran the challenge out of time."""
        if self.active:
            self.time_left = max(0, self.time_left - 1)
            if self.time_left == 0:
                self._end()
                return True
            return False
        if self.lockout_left > 0:
            self.lockout_left -= 1
        return False

    def _end(self) -> None:
        self.active = False
        self.time_left = 0
        self.lockout_left = self.lockout_seconds
        logger.debug("Challenge ended; locked out for %d seconds", self.lockout_seconds)


__all__ = ["ChallengeSession"]

"""Interface for reading the current time.

Injected into time-dependent components (the quota guard) so tests can
advance time without real delays.
"""

import abc


class Clock(abc.ABC):
    """Abstract wall clock."""

    @abc.abstractmethod
    def now(self) -> float:
        """Current time as seconds since the epoch."""
        pass

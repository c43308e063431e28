"""Quota circuit breaker shared by every upstream call of a process.

After the provider reports quota exhaustion the guard suppresses further
calls for a fixed cooldown. The breaker is global (not per endpoint) because
quota exhaustion applies to the whole API key.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

from agrohub.domain.interfaces.clock import Clock

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 5 * 60


class SystemClock(Clock):
    """Wall clock backed by time.time()."""

    def now(self) -> float:
        return time.time()


@dataclass(frozen=True)
class QuotaState:
    """Snapshot of the guard's state."""
    is_exhausted: bool
    reset_at: float


class QuotaGuard:
    """Read-and-reset circuit breaker for provider quota exhaustion.

    `permits()` self-clears an expired trip on the next check; there is no
    background timer. State is guarded by a lock because provider SDK calls
    run on worker threads.
    """

    def __init__(self, cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS, clock: Optional[Clock] = None):
        """Initializes the guard.

        Args:
            cooldown_seconds: How long calls stay suppressed after a trip.
            clock: Time source; defaults to the system clock.
        """
        if cooldown_seconds < 0:
            raise ValueError("cooldown_seconds must be non-negative")
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock or SystemClock()
        self._is_exhausted = False
        self._reset_at = 0.0
        self._lock = threading.Lock()
        logger.info(f"QuotaGuard initialized: cooldown={cooldown_seconds}s")

    def permits(self) -> bool:
        """Returns False only while a trip is active; clears expired trips."""
        with self._lock:
            if self._is_exhausted and self.clock.now() < self._reset_at:
                return False
            if self._is_exhausted:
                logger.info("Quota cooldown elapsed. Resuming upstream calls.")
            self._is_exhausted = False
            return True

    def trip(self) -> float:
        """Suppresses calls for the cooldown period.

        Returns:
            The timestamp at which calls may resume.
        """
        with self._lock:
            self._is_exhausted = True
            self._reset_at = self.clock.now() + self.cooldown_seconds
            reset_at = self._reset_at
        logger.warning(
            f"Upstream quota exhausted. Switching to local fallback mode for {self.cooldown_seconds:.0f}s."
        )
        return reset_at

    def reset(self) -> None:
        """Clears any active trip immediately."""
        with self._lock:
            self._is_exhausted = False
            self._reset_at = 0.0

    def seconds_until_reset(self) -> float:
        """Remaining cooldown, or 0.0 when calls are permitted."""
        with self._lock:
            if not self._is_exhausted:
                return 0.0
            return max(0.0, self._reset_at - self.clock.now())

    @property
    def state(self) -> QuotaState:
        with self._lock:
            return QuotaState(is_exhausted=self._is_exhausted, reset_at=self._reset_at)

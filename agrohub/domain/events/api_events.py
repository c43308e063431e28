"""Domain Events related to upstream calls, resilience and caching.

Examples include events for when calls are suppressed, retried, fail, or
succeed, when the quota guard trips, and when a resolver falls back.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# Receives every dispatched event; injected by the composition root or tests
EventSink = Callable[[DomainEvent], None]

# --- Upstream Call Events ---

@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when an upstream call is about to be made."""
    provider: str # e.g., 'gemini', 'groq'
    endpoint: str
    attempt_number: int = 1
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when an upstream call succeeds."""
    provider: str
    endpoint: str
    latency_ms: float
    response_summary: Optional[Any] = None # e.g., token usage
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when an upstream call fails definitively."""
    provider: str
    endpoint: str
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallSuppressed(DomainEvent):
    """Event triggered when the quota guard denies a call before it is made."""
    provider: str
    endpoint: str
    seconds_until_reset: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed upstream call."""
    provider: str
    endpoint: str
    attempt_number: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class QuotaExhaustedDetected(DomainEvent):
    """Event triggered when a rate-limit response trips the quota guard."""
    provider: str
    endpoint: str
    reset_at: float
    timestamp: float = field(default_factory=time.time)

# --- Cache & Resolver Events ---

@dataclass
class LocationCacheHit(DomainEvent):
    key: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class LocationCacheEvicted(DomainEvent):
    """Event triggered when a corrupt cache entry is removed."""
    key: str
    reason: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class ResolverFellBack(DomainEvent):
    """Event triggered when a resolver returns its fixed fallback value."""
    endpoint: str
    reason: str
    timestamp: float = field(default_factory=time.time)


def dispatch_event(event: DomainEvent, sink: Optional[EventSink] = None) -> None:
    """Logs the event and forwards it to the sink, if any.

    A failing sink is logged and otherwise ignored so observers can never
    break an upstream call.
    """
    logger.debug(f"EVENT: {event}")
    if sink is None:
        return
    try:
        sink(event)
    except Exception as e:
        logger.warning(f"Event sink failed for {type(event).__name__}: {e}")

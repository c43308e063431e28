"""Error types raised inside the advisory access layer.

Only the retry executor and the cache layer raise or inspect these directly.
The resolvers catch everything at their boundary and return a fallback value,
so none of these ever reach a resolver's caller.
"""

from typing import Optional


class AdvisoryError(Exception):
    """Base class for all errors raised by the advisory access layer."""


class QuotaPausedError(AdvisoryError):
    """The quota guard denied the call before any network attempt."""

    def __init__(self, seconds_remaining: float = 0.0):
        self.seconds_remaining = seconds_remaining
        super().__init__(f"QUOTA_PAUSED: upstream calls suppressed for another {seconds_remaining:.0f}s")


class QuotaExhaustedError(AdvisoryError):
    """The upstream signalled rate limiting on this attempt. Never retried."""

    def __init__(self, original_exception: Optional[BaseException] = None):
        self.original_exception = original_exception
        detail = f": {original_exception}" if original_exception else ""
        super().__init__(f"QUOTA_EXHAUSTED{detail}")


class UpstreamError(AdvisoryError):
    """Any non rate-limit failure of an upstream call or of its response."""


class EmptyResponseError(UpstreamError):
    """The upstream response carried no text."""


class SchemaValidationError(UpstreamError):
    """The parsed upstream payload does not match the declared response schema."""


class CredentialMissingError(UpstreamError):
    """No API credential is configured. Retrying cannot help."""


class CacheCorruptError(AdvisoryError):
    """A stored cache value failed to decode. Evicted, never surfaced."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Corrupt cache entry '{key}': {reason}")

"""Service for executing upstream calls with automatic retries.

Implements exponential backoff for transient errors, short-circuited by the
quota guard (no call is made while a quota trip is active) and by rate-limit
responses, which trip the guard and are never retried.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Coroutine, Optional, Tuple, Type

from groq import AuthenticationError as GroqAuthenticationError
from openai import AuthenticationError as OpenAIAuthenticationError

from agrohub.domain.events.api_events import (
    ApiCallFailed, ApiCallInitiated, ApiCallSucceeded, ApiCallSuppressed,
    EventSink, QuotaExhaustedDetected, RetryScheduled, dispatch_event,
)
from agrohub.domain.models.common import BackoffPolicy
from agrohub.domain.models.errors import CredentialMissingError, QuotaExhaustedError, QuotaPausedError
from agrohub.infrastructure.resilience.quota_guard import QuotaGuard
from agrohub.infrastructure.resilience.rate_limit_detection import is_rate_limit_error

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 1
DEFAULT_INITIAL_BACKOFF_S = 2.0
DEFAULT_BACKOFF_FACTOR = 2.0

# Errors that retrying cannot fix
NON_RETRYABLE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    OpenAIAuthenticationError,
    GroqAuthenticationError,
    CredentialMissingError,
)

SleepFunc = Callable[[float], Awaitable[Any]]


class ApiRetryService:
    """Handles upstream call execution with quota guarding and retries."""

    def __init__(
        self,
        quota_guard: QuotaGuard,
        provider_name: str = "gemini",
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_backoff_s: float = DEFAULT_INITIAL_BACKOFF_S,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        non_retryable_exceptions: Tuple[Type[BaseException], ...] = NON_RETRYABLE_EXCEPTIONS,
        sleep: SleepFunc = asyncio.sleep,
        event_sink: Optional[EventSink] = None,
    ):
        """Initializes the ApiRetryService.

        Args:
            quota_guard: Shared circuit breaker consulted before every attempt.
            provider_name: Name of the provider being called (for logging/events).
            max_retries: Retries after the first attempt.
            initial_backoff_s: Delay in seconds before the first retry.
            backoff_factor: Multiplier applied to the delay after each retry.
            non_retryable_exceptions: Errors re-raised without retrying.
            sleep: Awaitable delay function; injected in tests.
            event_sink: Optional receiver for domain events.
        """
        if max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        self.quota_guard = quota_guard
        self.provider_name = provider_name
        self.max_retries = max_retries
        self.initial_backoff_s = initial_backoff_s
        self.backoff_factor = backoff_factor
        self.non_retryable_exceptions = non_retryable_exceptions
        self._sleep = sleep
        self.event_sink = event_sink

        logger.info(
            f"ApiRetryService initialized: max_retries={max_retries}, "
            f"initial_backoff={initial_backoff_s}s, factor={backoff_factor}, provider='{provider_name}'"
        )

    @classmethod
    def from_policy(cls, quota_guard: QuotaGuard, policy: BackoffPolicy, **kwargs: Any) -> "ApiRetryService":
        """Builds the service from a BackoffPolicy value object."""
        return cls(
            quota_guard,
            max_retries=policy["max_retries"],
            initial_backoff_s=policy["initial_delay"],
            backoff_factor=policy["factor"],
            **kwargs,
        )

    def _dispatch(self, event: Any) -> None:
        dispatch_event(event, self.event_sink)

    async def execute_with_retry(
        self,
        func: Callable[..., Coroutine[Any, Any, Any]],
        *args: Any,
        endpoint_name: Optional[str] = None,
        max_retries: Optional[int] = None,
        initial_backoff_s: Optional[float] = None,
        **kwargs: Any
    ) -> Any:
        """Executes an async function with quota guarding and retries.

        Args:
            func: The async function (upstream call) to execute.
            *args: Positional arguments for the function.
            endpoint_name: Name used in logs/events (defaults to func.__name__).
            max_retries: Per-call override of the retry bound.
            initial_backoff_s: Per-call override of the first delay.
            **kwargs: Keyword arguments for the function.

        Returns:
            The result of the function call.

        Raises:
            QuotaPausedError: The guard denied an attempt; nothing was called.
            QuotaExhaustedError: The provider rate limited the call; the guard
                is now tripped.
            Exception: The last error once retries are exhausted, or any
                non-retryable error.
        """
        retries = self.max_retries if max_retries is None else max_retries
        current_backoff = self.initial_backoff_s if initial_backoff_s is None else initial_backoff_s
        endpoint = endpoint_name or getattr(func, "__name__", "call")

        for attempt in range(retries + 1):
            # 1. Fast-fail while the quota guard is tripped
            if not self.quota_guard.permits():
                remaining = self.quota_guard.seconds_until_reset()
                logger.info(f"Call to {self.provider_name}.{endpoint} suppressed; quota paused for {remaining:.0f}s")
                self._dispatch(ApiCallSuppressed(provider=self.provider_name, endpoint=endpoint, seconds_until_reset=remaining))
                raise QuotaPausedError(remaining)

            # 2. Execute the function
            try:
                self._dispatch(ApiCallInitiated(provider=self.provider_name, endpoint=endpoint, attempt_number=attempt + 1))
                start_time = time.perf_counter()
                result = await func(*args, **kwargs)
                latency_ms = (time.perf_counter() - start_time) * 1000

                if hasattr(result, 'latency_ms') and result.latency_ms is None:
                    result.latency_ms = latency_ms
                response_summary = getattr(result, 'token_usage', None)

                self._dispatch(ApiCallSucceeded(provider=self.provider_name, endpoint=endpoint, latency_ms=latency_ms, response_summary=response_summary))
                return result

            except Exception as e:
                # 3. Rate limiting trips the guard and is never retried
                if is_rate_limit_error(e):
                    reset_at = self.quota_guard.trip()
                    self._dispatch(QuotaExhaustedDetected(provider=self.provider_name, endpoint=endpoint, reset_at=reset_at))
                    self._dispatch(ApiCallFailed(provider=self.provider_name, endpoint=endpoint, error_type=type(e).__name__, error_message=str(e)))
                    raise QuotaExhaustedError(e) from e

                if isinstance(e, self.non_retryable_exceptions):
                    logger.error(f"Non-retryable error calling {self.provider_name}.{endpoint} on attempt {attempt + 1}: {e}")
                    self._dispatch(ApiCallFailed(provider=self.provider_name, endpoint=endpoint, error_type=type(e).__name__, error_message=str(e)))
                    raise

                # 4. Back off and retry, or give up with the original error
                if attempt < retries:
                    logger.warning(
                        f"Retryable error calling {self.provider_name}.{endpoint} on attempt {attempt + 1}/{retries + 1}: "
                        f"{type(e).__name__}. Waiting {current_backoff:.2f}s..."
                    )
                    self._dispatch(RetryScheduled(provider=self.provider_name, endpoint=endpoint, attempt_number=attempt + 1, delay_seconds=current_backoff))
                    await self._sleep(current_backoff)
                    current_backoff *= self.backoff_factor
                    continue

                logger.error(f"Max retries ({retries}) reached for {self.provider_name}.{endpoint}. Last error: {e}")
                self._dispatch(ApiCallFailed(provider=self.provider_name, endpoint=endpoint, error_type=type(e).__name__, error_message=str(e)))
                raise

        # Only reachable with a negative per-call retry bound
        raise ValueError(f"Invalid retry bound: {retries}")

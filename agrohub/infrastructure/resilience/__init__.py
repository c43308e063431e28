"""API Resilience Implementations.

Contains the quota circuit breaker, rate-limit error detection and the
retry executor with exponential backoff.
Bounded Context: API Resilience
"""

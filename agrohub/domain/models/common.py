"""Defines common Value Objects used across different domain contexts.

These objects represent simple values or concepts like prompts, cache keys,
model names and retry policies, ensuring consistency and type safety.
"""

from typing import NewType, Tuple, TypedDict

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
PromptText = NewType("PromptText", str)        # Prompt sent to the upstream model
ProviderName = NewType("ProviderName", str)    # 'gemini', 'openai', 'groq'

# === Caching Context ===
CacheKey = NewType("CacheKey", str)              # Unique key for a cache entry
CacheNamespace = NewType("CacheNamespace", str)  # Versioned prefix, e.g. 'agrohub_loc_v2'
GeoBucket = Tuple[int, int]                      # (lat bucket, lng bucket)

# === Endpoint Names (used in events and logs) ===
ENDPOINT_LOCATION = "resolve_location"
ENDPOINT_PRICE = "price_suggestion"
ENDPOINT_WEATHER = "weather_advice"

# --- Structured Data ---
class TokenUsage(TypedDict):
    """Represents token usage information from an AI call."""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

class BackoffPolicy(TypedDict):
    """Value Object representing retry backoff configuration."""
    max_retries: int
    initial_delay: float
    factor: float

"""Domain Event definitions.

Represents significant occurrences during an upstream lookup (calls, retries,
quota trips, cache evictions, fallbacks) that observers may react to.
"""

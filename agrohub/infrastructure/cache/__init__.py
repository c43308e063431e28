"""Caching Implementations.

Provides concrete key-value stores (in-memory, disk-persisted) and the
geo-bucketed location cache built on top of them.
Bounded Context: Cache Management
"""

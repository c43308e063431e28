"""Geo-bucketed cache of resolved locations.

Coordinates are quantized to one decimal degree (about 11 km) so nearby
callers share one entry. Keys carry a versioned namespace so a change of the
stored format never reads stale entries. Values are JSON objects with the
camelCase LocationInfo fields.
"""

import json
import logging
import math
from typing import Optional

from agrohub.domain.events.api_events import (
    EventSink, LocationCacheEvicted, LocationCacheHit, dispatch_event,
)
from agrohub.domain.interfaces.cache import KeyValueStore
from agrohub.domain.models.advisory import LocationInfo
from agrohub.domain.models.common import CacheKey, CacheNamespace, GeoBucket
from agrohub.domain.models.errors import CacheCorruptError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = CacheNamespace("agrohub_loc_v2")


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer, halves towards +infinity."""
    return math.floor(value + 0.5)


def geo_bucket(lat: float, lng: float) -> GeoBucket:
    """Quantizes coordinates to a one-decimal-degree grid cell."""
    return round_half_up(lat * 10), round_half_up(lng * 10)


def decode_location(key: str, raw: str) -> LocationInfo:
    """Parses a stored value.

    Raises:
        CacheCorruptError: If the value is not JSON or lacks a field.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise CacheCorruptError(key, f"invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise CacheCorruptError(key, f"expected an object, got {type(data).__name__}")
    try:
        info = LocationInfo.from_dict(data)
    except KeyError as e:
        raise CacheCorruptError(key, f"missing field {e}") from e
    fields = (info.country, info.currency_code, info.currency_symbol, info.region_name)
    if not all(isinstance(value, str) for value in fields):
        raise CacheCorruptError(key, "non-string field value")
    return info


class LocationCache:
    """Write-through cache for location lookups, keyed by geo bucket."""

    def __init__(
        self,
        store: KeyValueStore,
        namespace: str = DEFAULT_NAMESPACE,
        event_sink: Optional[EventSink] = None,
    ):
        self.store = store
        self.namespace = namespace
        self.event_sink = event_sink

    def key_for(self, lat: float, lng: float) -> CacheKey:
        lat_bucket, lng_bucket = geo_bucket(lat, lng)
        return CacheKey(f"{self.namespace}_{lat_bucket}_{lng_bucket}")

    async def get(self, lat: float, lng: float) -> Optional[LocationInfo]:
        """Returns the cached location, or None on a miss.

        Corrupt entries are evicted and reported as a miss.
        """
        key = self.key_for(lat, lng)
        raw = await self.store.get(key)
        if raw is None:
            logger.debug(f"Location cache MISS for key: {key}")
            return None
        try:
            info = decode_location(key, raw)
        except CacheCorruptError as e:
            logger.warning(f"{e}. Removing.")
            await self.store.delete(key)
            dispatch_event(LocationCacheEvicted(key=key, reason=e.reason), self.event_sink)
            return None
        logger.debug(f"Location cache HIT for key: {key}")
        dispatch_event(LocationCacheHit(key=key), self.event_sink)
        return info

    async def put(self, lat: float, lng: float, info: LocationInfo) -> None:
        key = self.key_for(lat, lng)
        await self.store.set(key, json.dumps(info.to_dict()))
        logger.debug(f"Location cache PUT key: {key}")

    async def clear(self) -> int:
        return await self.store.clear()

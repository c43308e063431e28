"""Application service resolving locations, price suggestions and weather advice.

Each resolver builds a prompt, runs one structured upstream call through the
retry executor, and validates the JSON it gets back. Every resolver is a
total boundary: any failure (quota pause, rate limit, exhausted retries,
empty or malformed response) becomes that resolver's fixed fallback value,
so callers never see an exception.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, TypeVar

from agrohub.core.prompts import build_location_prompt, build_price_prompt, build_weather_prompt
from agrohub.domain.events.api_events import EventSink, ResolverFellBack, dispatch_event
from agrohub.domain.interfaces.ai_model import AIModel
from agrohub.domain.models.advisory import (
    DEFAULT_DASHBOARD_CROP, DEFAULT_DASHBOARD_CURRENCY, DEFAULT_DASHBOARD_REGION,
    FALLBACK_LOCATION, LOCATION_SCHEMA, PRICE_SCHEMA, WEATHER_SCHEMA,
    DashboardInsights, LocationInfo, PriceSuggestion, ResolutionOutcome, ResolutionSource,
    WeatherAdvice, fallback_price_suggestion, fallback_weather_advice,
)
from agrohub.domain.models.ai import ResponseSchema, StructuredAIResponse
from agrohub.domain.models.common import (
    ENDPOINT_LOCATION, ENDPOINT_PRICE, ENDPOINT_WEATHER, PromptText,
)
from agrohub.domain.models.errors import (
    EmptyResponseError, QuotaExhaustedError, QuotaPausedError, UpstreamError,
)
from agrohub.infrastructure.cache.location_cache import LocationCache
from agrohub.infrastructure.resilience.api_retry import ApiRetryService

logger = logging.getLogger(__name__)

T = TypeVar("T")


def decode_structured_response(response: Optional[StructuredAIResponse], schema: ResponseSchema) -> Dict[str, Any]:
    """Turns an upstream response into a validated dict.

    Raises:
        EmptyResponseError: If the response has no text.
        UpstreamError: If the text is not JSON.
        SchemaValidationError: If the JSON does not match `schema`.
    """
    text = response.text if response is not None else None
    if not text or not text.strip():
        raise EmptyResponseError(f"No text in {schema.name} response")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise UpstreamError(f"{schema.name} response is not valid JSON: {e}") from e
    return schema.validate(payload)


class AdvisoryService:
    """Resolves the three advisory lookups with caching, retries and fallbacks."""

    def __init__(
        self,
        ai_model: AIModel,
        api_retry_service: ApiRetryService,
        location_cache: Optional[LocationCache] = None,
        event_sink: Optional[EventSink] = None,
    ):
        """Initializes the service.

        Args:
            ai_model: Provider client used for every upstream call.
            api_retry_service: Retry executor sharing the process quota guard.
            location_cache: Geo-bucketed cache; location lookups are not cached
                when omitted.
            event_sink: Optional receiver for fallback events.
        """
        self.ai_model = ai_model
        self.api_retry_service = api_retry_service
        self.location_cache = location_cache
        self.event_sink = event_sink

    async def _fetch_structured(self, prompt: PromptText, schema: ResponseSchema, endpoint: str) -> Dict[str, Any]:
        """One upstream call plus decoding, retried as a unit."""
        async def call() -> Dict[str, Any]:
            response = await self.ai_model.generate_structured(prompt, schema)
            return decode_structured_response(response, schema)

        return await self.api_retry_service.execute_with_retry(call, endpoint_name=endpoint)

    def _fallback(self, value: T, endpoint: str, error: Exception) -> ResolutionOutcome[T]:
        reason = f"{type(error).__name__}: {error}"
        if isinstance(error, (QuotaPausedError, QuotaExhaustedError)):
            logger.warning(f"{endpoint}: quota unavailable, using fallback ({error})")
        else:
            logger.error(f"{endpoint} failed, using fallback: {reason}")
        dispatch_event(ResolverFellBack(endpoint=endpoint, reason=reason), self.event_sink)
        return ResolutionOutcome(
            value=value,
            source=ResolutionSource.FALLBACK,
            fallback_reason=reason,
            quota_paused=isinstance(error, QuotaPausedError),
        )

    # --- Location ---

    async def _read_location_cache(self, lat: float, lng: float) -> Optional[LocationInfo]:
        if self.location_cache is None:
            return None
        try:
            return await self.location_cache.get(lat, lng)
        except Exception as e:
            logger.warning(f"Location cache read failed, treating as miss: {e}")
            return None

    async def _write_location_cache(self, lat: float, lng: float, info: LocationInfo) -> None:
        if self.location_cache is None:
            return
        try:
            await self.location_cache.put(lat, lng, info)
        except Exception as e:
            logger.warning(f"Location cache write failed: {e}")

    async def resolve_location_outcome(self, lat: float, lng: float) -> ResolutionOutcome[LocationInfo]:
        """Resolves coordinates to country and currency, tagged with its source."""
        cached = await self._read_location_cache(lat, lng)
        if cached is not None:
            return ResolutionOutcome(value=cached, source=ResolutionSource.CACHE)

        try:
            data = await self._fetch_structured(build_location_prompt(lat, lng), LOCATION_SCHEMA, ENDPOINT_LOCATION)
            info = LocationInfo.from_dict(data)
        except Exception as e:
            # Failures are never cached so a later call can try upstream again
            return self._fallback(FALLBACK_LOCATION, ENDPOINT_LOCATION, e)

        await self._write_location_cache(lat, lng, info)
        return ResolutionOutcome(value=info, source=ResolutionSource.UPSTREAM)

    async def resolve_location(self, lat: float, lng: float) -> LocationInfo:
        """Resolves coordinates to country and currency. Never raises."""
        outcome = await self.resolve_location_outcome(lat, lng)
        return outcome.value

    # --- Price ---

    async def get_price_suggestion_outcome(self, crop_name: str, region: str, currency: str) -> ResolutionOutcome[PriceSuggestion]:
        try:
            data = await self._fetch_structured(build_price_prompt(crop_name, region, currency), PRICE_SCHEMA, ENDPOINT_PRICE)
            return ResolutionOutcome(value=PriceSuggestion.from_dict(data), source=ResolutionSource.UPSTREAM)
        except Exception as e:
            return self._fallback(fallback_price_suggestion(currency), ENDPOINT_PRICE, e)

    async def get_price_suggestion(self, crop_name: str, region: str, currency: str) -> PriceSuggestion:
        """Fair-market price estimate for a crop. Never raises."""
        outcome = await self.get_price_suggestion_outcome(crop_name, region, currency)
        return outcome.value

    # --- Weather ---

    async def get_weather_advice_outcome(self, location: str) -> ResolutionOutcome[WeatherAdvice]:
        try:
            data = await self._fetch_structured(build_weather_prompt(location), WEATHER_SCHEMA, ENDPOINT_WEATHER)
            return ResolutionOutcome(value=WeatherAdvice.from_dict(data), source=ResolutionSource.UPSTREAM)
        except Exception as e:
            return self._fallback(fallback_weather_advice(), ENDPOINT_WEATHER, e)

    async def get_weather_advice(self, location: str) -> WeatherAdvice:
        """Agricultural weather outlook for a location. Never raises."""
        outcome = await self.get_weather_advice_outcome(location)
        return outcome.value

    # --- Dashboard ---

    async def get_dashboard_insights(
        self,
        region: Optional[str] = None,
        currency: Optional[str] = None,
        crop_name: str = DEFAULT_DASHBOARD_CROP,
    ) -> DashboardInsights:
        """Fetches price and weather for one region concurrently. Never raises."""
        region = region or DEFAULT_DASHBOARD_REGION
        currency = currency or DEFAULT_DASHBOARD_CURRENCY
        price, weather = await asyncio.gather(
            self.get_price_suggestion_outcome(crop_name, region, currency),
            self.get_weather_advice_outcome(region),
        )
        return DashboardInsights(
            region=region,
            currency=currency,
            crop_name=crop_name,
            price=price.value,
            weather=weather.value,
            price_used_fallback=price.used_fallback,
            weather_used_fallback=weather.used_fallback,
        )

    async def get_dashboard_insights_for_location(
        self, location: Optional[LocationInfo], crop_name: str = DEFAULT_DASHBOARD_CROP
    ) -> DashboardInsights:
        """Dashboard insights for a resolved location, or the defaults when None."""
        if location is None:
            return await self.get_dashboard_insights(crop_name=crop_name)
        return await self.get_dashboard_insights(location.display_region, location.currency_code, crop_name)

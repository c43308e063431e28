"""Domain models for the three advisory lookups.

Each result type has a fixed fallback value with the same shape as a real
upstream result, plus the response schema sent to the model. Wire keys
(cache values, upstream JSON) are camelCase; attributes are snake_case.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar

from .ai import FIELD_STRING, FIELD_STRING_ARRAY, ResponseSchema

T = TypeVar("T")


@dataclass(frozen=True)
class LocationInfo:
    """Country and currency details resolved for a pair of coordinates."""
    country: str
    currency_code: str
    currency_symbol: str
    region_name: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "country": self.country,
            "currencyCode": self.currency_code,
            "currencySymbol": self.currency_symbol,
            "regionName": self.region_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocationInfo":
        return cls(
            country=data["country"],
            currency_code=data["currencyCode"],
            currency_symbol=data["currencySymbol"],
            region_name=data["regionName"],
        )

    @property
    def display_region(self) -> str:
        """Region label used when prompting for prices and weather."""
        return f"{self.region_name}, {self.country}"


@dataclass(frozen=True)
class PriceSuggestion:
    """Fair-market price estimate for a crop."""
    suggested_price: str
    reasoning: str
    trends: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "suggestedPrice": self.suggested_price,
            "reasoning": self.reasoning,
            "trends": self.trends,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceSuggestion":
        return cls(
            suggested_price=data["suggestedPrice"],
            reasoning=data["reasoning"],
            trends=data["trends"],
        )


@dataclass(frozen=True)
class WeatherAdvice:
    """Agricultural weather outlook with ordered advice items."""
    outlook: str
    advice: List[str]
    risk_level: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outlook": self.outlook,
            "advice": list(self.advice),
            "riskLevel": self.risk_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeatherAdvice":
        return cls(
            outlook=data["outlook"],
            advice=list(data["advice"]),
            risk_level=data["riskLevel"],
        )


@dataclass(frozen=True)
class DashboardInsights:
    """Price and weather results fetched together for one region."""
    region: str
    currency: str
    crop_name: str
    price: PriceSuggestion
    weather: WeatherAdvice
    price_used_fallback: bool = False
    weather_used_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region": self.region,
            "currency": self.currency,
            "cropName": self.crop_name,
            "price": self.price.to_dict(),
            "weather": self.weather.to_dict(),
            "usedFallback": {
                "price": self.price_used_fallback,
                "weather": self.weather_used_fallback,
            },
        }


# --- Tagged resolution results ---

class ResolutionSource(str, enum.Enum):
    """Where a resolver's value came from."""
    UPSTREAM = "upstream"
    CACHE = "cache"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ResolutionOutcome(Generic[T]):
    """A resolver value tagged with its source.

    Callers that only want the value use the plain resolver methods; this
    lets logging and operator-facing tools tell degraded answers apart.
    """
    value: T
    source: ResolutionSource
    fallback_reason: Optional[str] = None
    quota_paused: bool = False

    @property
    def used_fallback(self) -> bool:
        return self.source is ResolutionSource.FALLBACK


# --- Response schemas ---

LOCATION_SCHEMA = ResponseSchema(
    name="location_info",
    properties={
        "country": FIELD_STRING,
        "currencyCode": FIELD_STRING,
        "currencySymbol": FIELD_STRING,
        "regionName": FIELD_STRING,
    },
    required=["country", "currencyCode", "currencySymbol", "regionName"],
)

PRICE_SCHEMA = ResponseSchema(
    name="price_suggestion",
    properties={
        "suggestedPrice": FIELD_STRING,
        "reasoning": FIELD_STRING,
        "trends": FIELD_STRING,
    },
    required=["suggestedPrice", "reasoning", "trends"],
)

WEATHER_SCHEMA = ResponseSchema(
    name="weather_advice",
    properties={
        "outlook": FIELD_STRING,
        "advice": FIELD_STRING_ARRAY,
        "riskLevel": FIELD_STRING,
    },
    required=["outlook", "advice", "riskLevel"],
)


# --- Fixed fallback values ---

FALLBACK_LOCATION = LocationInfo(
    country="Uganda",
    currency_code="UGX",
    currency_symbol="USh",
    region_name="Kampala",
)

FALLBACK_PRICE_REASONING = "Based on recent seasonal market averages for this specific region."
FALLBACK_PRICE_TRENDS = "Stable demand expected; prices likely to remain consistent through the week."

FALLBACK_WEATHER = WeatherAdvice(
    outlook="Standard seasonal conditions for the local agricultural belt.",
    advice=[
        "Optimal time for weeding and general field maintenance.",
        "Check irrigation systems for efficiency during dry spells.",
        "Maintain post-harvest storage ventilation.",
    ],
    risk_level="Low",
)

# Used by the dashboard when no location has been resolved
DEFAULT_DASHBOARD_REGION = "Nairobi, Kenya"
DEFAULT_DASHBOARD_CURRENCY = "KES"
DEFAULT_DASHBOARD_CROP = "Tomatoes"


def fallback_price_suggestion(currency: str) -> PriceSuggestion:
    """Generic price range quoted in the caller's currency."""
    return PriceSuggestion(
        suggested_price=f"{currency} 12,500 - 14,800",
        reasoning=FALLBACK_PRICE_REASONING,
        trends=FALLBACK_PRICE_TRENDS,
    )


def fallback_weather_advice() -> WeatherAdvice:
    # WeatherAdvice is frozen but its list is not; hand out a copy
    return WeatherAdvice(
        outlook=FALLBACK_WEATHER.outlook,
        advice=list(FALLBACK_WEATHER.advice),
        risk_level=FALLBACK_WEATHER.risk_level,
    )

"""Prompt builders for the advisory lookups."""

from agrohub.domain.models.common import PromptText


def build_location_prompt(lat: float, lng: float) -> PromptText:
    return PromptText(
        f"The user is at latitude {lat}, longitude {lng}. Determine the country, "
        "ISO 4217 currency code, symbol, and region name. Return strictly JSON."
    )


def build_price_prompt(crop_name: str, region: str, currency: str) -> PromptText:
    return PromptText(
        f"Fair market price for {crop_name} in {region} ({currency}). "
        "Return JSON with suggestedPrice, reasoning, trends."
    )


def build_weather_prompt(location: str) -> PromptText:
    return PromptText(
        f"Agricultural weather outlook/advice for {location}. "
        "Return JSON with outlook, advice (array), riskLevel."
    )

"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work
to the AdvisoryService and hands the results to the user interface.
"""

import logging
from typing import Optional

from agrohub.core.services.advisory_service import AdvisoryService
from agrohub.domain.interfaces.user_interface import UserInterface
from agrohub.domain.models.advisory import DEFAULT_DASHBOARD_CROP, LocationInfo
from agrohub.infrastructure.cache.location_cache import LocationCache

logger = logging.getLogger(__name__)


class CommandHandler:
    """Handles incoming commands and delegates to the advisory service."""

    def __init__(
        self,
        advisory_service: AdvisoryService,
        ui: UserInterface,
        location_cache: Optional[LocationCache] = None, # For clear-cache
    ):
        self.advisory_service = advisory_service
        self.ui = ui
        self.location_cache = location_cache

    async def handle_location(self, lat: float, lng: float, as_json: bool = False) -> None:
        logger.info(f"Handling 'location' command for ({lat}, {lng})")
        outcome = await self.advisory_service.resolve_location_outcome(lat, lng)
        if as_json:
            self.ui.display_json(outcome.value.to_dict())
        else:
            self.ui.display_location(outcome)

    async def handle_price(self, crop_name: str, region: str, currency: str, as_json: bool = False) -> None:
        logger.info(f"Handling 'price' command for {crop_name} in {region} ({currency})")
        outcome = await self.advisory_service.get_price_suggestion_outcome(crop_name, region, currency)
        if as_json:
            self.ui.display_json(outcome.value.to_dict())
        else:
            self.ui.display_price_suggestion(outcome, crop_name)

    async def handle_weather(self, location: str, as_json: bool = False) -> None:
        logger.info(f"Handling 'weather' command for {location}")
        outcome = await self.advisory_service.get_weather_advice_outcome(location)
        if as_json:
            self.ui.display_json(outcome.value.to_dict())
        else:
            self.ui.display_weather_advice(outcome, location)

    async def handle_dashboard(
        self,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        crop_name: str = DEFAULT_DASHBOARD_CROP,
        as_json: bool = False,
    ) -> None:
        """Resolves the location (when coordinates are given) then price and weather together."""
        location: Optional[LocationInfo] = None
        if lat is not None and lng is not None:
            location = await self.advisory_service.resolve_location(lat, lng)
        elif lat is not None or lng is not None:
            self.ui.display_error("Both --lat and --lng are required to resolve a location; using defaults.")

        insights = await self.advisory_service.get_dashboard_insights_for_location(location, crop_name)
        if as_json:
            self.ui.display_json(insights.to_dict())
        else:
            self.ui.display_dashboard(insights)

    async def handle_clear_cache(self) -> None:
        if self.location_cache is None:
            self.ui.display_info("No location cache configured.")
            return
        try:
            removed = await self.location_cache.clear()
        except Exception as e:
            logger.error(f"Failed to clear location cache: {e}", exc_info=True)
            self.ui.display_error(f"Failed to clear location cache: {e}")
            return
        self.ui.display_info(f"Location cache cleared ({removed} entries removed).")

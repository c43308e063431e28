import pytest
from unittest.mock import MagicMock

from agrohub.core.command_handler import CommandHandler
from agrohub.core.services.advisory_service import AdvisoryService
from agrohub.domain.interfaces.user_interface import UserInterface
from agrohub.domain.models.advisory import (
    FALLBACK_LOCATION, DashboardInsights, LocationInfo, PriceSuggestion, ResolutionOutcome,
    ResolutionSource, fallback_weather_advice,
)
from agrohub.infrastructure.cache.location_cache import LocationCache

KENYA = LocationInfo(country="Kenya", currency_code="KES", currency_symbol="KSh", region_name="Nairobi")
PRICE = PriceSuggestion(suggested_price="KES 100", reasoning="r", trends="t")


@pytest.fixture
def mock_advisory_service():
    return MagicMock(spec=AdvisoryService)

@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)

@pytest.fixture
def mock_location_cache():
    return MagicMock(spec=LocationCache)

@pytest.fixture
def command_handler(mock_advisory_service, mock_ui, mock_location_cache):
    """Fixture to create CommandHandler with mocked services."""
    return CommandHandler(
        advisory_service=mock_advisory_service,
        ui=mock_ui,
        location_cache=mock_location_cache,
    )

def _insights(**overrides):
    values = dict(
        region="Nairobi, Kenya", currency="KES", crop_name="Tomatoes",
        price=PRICE, weather=fallback_weather_advice(),
    )
    values.update(overrides)
    return DashboardInsights(**values)


@pytest.mark.asyncio
async def test_handle_location(command_handler, mock_advisory_service, mock_ui):
    outcome = ResolutionOutcome(KENYA, ResolutionSource.CACHE)
    mock_advisory_service.resolve_location_outcome.return_value = outcome

    await command_handler.handle_location(-1.29, 36.82)

    mock_advisory_service.resolve_location_outcome.assert_awaited_once_with(-1.29, 36.82)
    mock_ui.display_location.assert_called_once_with(outcome)
    mock_ui.display_json.assert_not_called()

@pytest.mark.asyncio
async def test_handle_location_json(command_handler, mock_advisory_service, mock_ui):
    mock_advisory_service.resolve_location_outcome.return_value = ResolutionOutcome(
        FALLBACK_LOCATION, ResolutionSource.FALLBACK, fallback_reason="QuotaPausedError",
    )

    await command_handler.handle_location(0.0, 0.0, as_json=True)

    mock_ui.display_json.assert_called_once_with(FALLBACK_LOCATION.to_dict())

@pytest.mark.asyncio
async def test_handle_price(command_handler, mock_advisory_service, mock_ui):
    outcome = ResolutionOutcome(PRICE, ResolutionSource.UPSTREAM)
    mock_advisory_service.get_price_suggestion_outcome.return_value = outcome

    await command_handler.handle_price("Tomatoes", "Nairobi, Kenya", "KES")

    mock_advisory_service.get_price_suggestion_outcome.assert_awaited_once_with("Tomatoes", "Nairobi, Kenya", "KES")
    mock_ui.display_price_suggestion.assert_called_once_with(outcome, "Tomatoes")

@pytest.mark.asyncio
async def test_handle_weather_json(command_handler, mock_advisory_service, mock_ui):
    weather = fallback_weather_advice()
    mock_advisory_service.get_weather_advice_outcome.return_value = ResolutionOutcome(weather, ResolutionSource.FALLBACK)

    await command_handler.handle_weather("Gulu", as_json=True)

    mock_ui.display_json.assert_called_once_with(weather.to_dict())
    mock_ui.display_weather_advice.assert_not_called()

@pytest.mark.asyncio
async def test_handle_dashboard_with_coordinates(command_handler, mock_advisory_service, mock_ui):
    mock_advisory_service.resolve_location.return_value = KENYA
    insights = _insights()
    mock_advisory_service.get_dashboard_insights_for_location.return_value = insights

    await command_handler.handle_dashboard(-1.29, 36.82, "Tomatoes")

    mock_advisory_service.resolve_location.assert_awaited_once_with(-1.29, 36.82)
    mock_advisory_service.get_dashboard_insights_for_location.assert_awaited_once_with(KENYA, "Tomatoes")
    mock_ui.display_dashboard.assert_called_once_with(insights)

@pytest.mark.asyncio
async def test_handle_dashboard_without_coordinates_uses_defaults(command_handler, mock_advisory_service, mock_ui):
    insights = _insights()
    mock_advisory_service.get_dashboard_insights_for_location.return_value = insights

    await command_handler.handle_dashboard(crop_name="Maize", as_json=True)

    mock_advisory_service.resolve_location.assert_not_awaited()
    mock_advisory_service.get_dashboard_insights_for_location.assert_awaited_once_with(None, "Maize")
    mock_ui.display_json.assert_called_once_with(insights.to_dict())

@pytest.mark.asyncio
async def test_handle_dashboard_with_one_coordinate(command_handler, mock_advisory_service, mock_ui):
    mock_advisory_service.get_dashboard_insights_for_location.return_value = _insights()

    await command_handler.handle_dashboard(lat=1.0)

    mock_ui.display_error.assert_called_once()
    mock_advisory_service.resolve_location.assert_not_awaited()
    mock_advisory_service.get_dashboard_insights_for_location.assert_awaited_once_with(None, "Tomatoes")

@pytest.mark.asyncio
async def test_handle_clear_cache(command_handler, mock_location_cache, mock_ui):
    mock_location_cache.clear.return_value = 3

    await command_handler.handle_clear_cache()

    mock_location_cache.clear.assert_awaited_once()
    mock_ui.display_info.assert_called_once_with("Location cache cleared (3 entries removed).")

@pytest.mark.asyncio
async def test_handle_clear_cache_error(command_handler, mock_location_cache, mock_ui):
    mock_location_cache.clear.side_effect = OSError("read-only filesystem")

    await command_handler.handle_clear_cache()

    mock_ui.display_error.assert_called_once_with("Failed to clear location cache: read-only filesystem")

@pytest.mark.asyncio
async def test_handle_clear_cache_without_cache(mock_advisory_service, mock_ui):
    handler = CommandHandler(advisory_service=mock_advisory_service, ui=mock_ui)

    await handler.handle_clear_cache()

    mock_ui.display_info.assert_called_once_with("No location cache configured.")

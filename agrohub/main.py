"""Main entry point for the agrohub application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
import sys
from typing import Any, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from agrohub.core.command_handler import CommandHandler
from agrohub.core.services.advisory_service import AdvisoryService
from agrohub.domain.models.advisory import DEFAULT_DASHBOARD_CROP
# --- Infrastructure Layer ---
from agrohub.infrastructure.ai.provider_factory import create_ai_model
from agrohub.infrastructure.cache.key_value_store import DiskKeyValueStore, InMemoryKeyValueStore
from agrohub.infrastructure.cache.location_cache import LocationCache
from agrohub.infrastructure.cli.display import ConsoleDisplay
from agrohub.infrastructure.config.settings import (
    get_api_key, get_base_url, get_cache_backend, get_cache_dir, get_cache_namespace,
    get_config, get_default_model, get_default_provider, get_quota_cooldown_seconds,
    get_request_timeout, get_retry_policy, load_configuration,
)
from agrohub.infrastructure.monitoring.logger_setup import setup_logging
from agrohub.infrastructure.resilience.api_retry import ApiRetryService
from agrohub.infrastructure.resilience.quota_guard import QuotaGuard

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.
    """
    dependencies: Dict[str, Any] = {}

    # 1. Load Configuration First
    load_configuration()
    setup_logging(
        log_level=get_config('logging.level', 'WARNING'),
        log_format=get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
        log_file=get_config('logging.file'),
    )
    logger.info("Initializing application dependencies...")

    # 2. Instantiate Infrastructure Adapters & Services
    dependencies['ui'] = ConsoleDisplay()
    if get_cache_backend() == 'memory':
        dependencies['store'] = InMemoryKeyValueStore()
    else:
        dependencies['store'] = DiskKeyValueStore(get_cache_dir())
    dependencies['location_cache'] = LocationCache(dependencies['store'], namespace=get_cache_namespace())

    # 3. Instantiate the AI Model Client
    provider = get_default_provider()
    dependencies['ai_model'] = create_ai_model(
        provider,
        api_key=get_api_key(provider),
        model=get_default_model(provider),
        base_url=get_base_url(provider),
        timeout_s=get_request_timeout(),
    )
    logger.info(f"AI provider selected: {provider} ({dependencies['ai_model'].__class__.__name__})")

    # 4. Instantiate Resilience Services (one quota guard per process)
    dependencies['quota_guard'] = QuotaGuard(cooldown_seconds=get_quota_cooldown_seconds())
    dependencies['api_retry_service'] = ApiRetryService.from_policy(
        dependencies['quota_guard'], get_retry_policy(), provider_name=provider,
    )

    # 5. Instantiate Core Services (injecting dependencies)
    dependencies['advisory_service'] = AdvisoryService(
        ai_model=dependencies['ai_model'],
        api_retry_service=dependencies['api_retry_service'],
        location_cache=dependencies['location_cache'],
    )

    # 6. Instantiate Command Handler
    dependencies['command_handler'] = CommandHandler(
        advisory_service=dependencies['advisory_service'],
        ui=dependencies['ui'],
        location_cache=dependencies['location_cache'],
    )
    logger.info("All dependencies initialized successfully.")
    return dependencies


_dependencies: Optional[Dict[str, Any]] = None


def get_dependencies() -> Dict[str, Any]:
    """Builds the dependency container on first use."""
    global _dependencies
    if _dependencies is None:
        try:
            _dependencies = create_dependencies()
        except Exception as e:
            logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
            print(f"FATAL ERROR during initialization: {e}", file=sys.stderr)
            raise typer.Exit(code=1)
    return _dependencies


def reset_dependencies() -> None:
    """Drops the cached container (used by tests)."""
    global _dependencies
    _dependencies = None


# --- Typer App Definition ---
app = typer.Typer(
    name="agrohub",
    help="AgroHub advisory client: location currency lookup, crop price suggestions and weather advice.",
    add_completion=False,
)


def run_async(coro: Coroutine[Any, Any, None]) -> None:
    """Runs an async handler from a sync Typer command."""
    asyncio.run(coro)


def _handler() -> CommandHandler:
    return get_dependencies()['command_handler']


JsonOption = Annotated[bool, typer.Option("--json", help="Print the result as JSON.")]

# --- CLI Commands ---

@app.command()
def location(
    lat: Annotated[float, typer.Argument(help="Latitude in decimal degrees.")],
    lng: Annotated[float, typer.Argument(help="Longitude in decimal degrees.")],
    as_json: JsonOption = False,
):
    """Resolve coordinates to country, currency and region."""
    run_async(_handler().handle_location(lat, lng, as_json=as_json))


@app.command()
def price(
    crop: Annotated[str, typer.Argument(help="Crop name, e.g. 'Tomatoes'.")],
    region: Annotated[str, typer.Option("--region", "-r", help="Market region.")] = "Kampala, Uganda",
    currency: Annotated[str, typer.Option("--currency", "-c", help="ISO 4217 currency code.")] = "UGX",
    as_json: JsonOption = False,
):
    """Suggest a fair-market price for a crop."""
    run_async(_handler().handle_price(crop, region, currency, as_json=as_json))


@app.command()
def weather(
    place: Annotated[str, typer.Argument(help="Location to get the outlook for.")],
    as_json: JsonOption = False,
):
    """Agricultural weather outlook and advice."""
    run_async(_handler().handle_weather(place, as_json=as_json))


@app.command()
def dashboard(
    lat: Annotated[Optional[float], typer.Option("--lat", help="Latitude used to resolve the region.")] = None,
    lng: Annotated[Optional[float], typer.Option("--lng", help="Longitude used to resolve the region.")] = None,
    crop: Annotated[str, typer.Option("--crop", help="Crop to price.")] = DEFAULT_DASHBOARD_CROP,
    as_json: JsonOption = False,
):
    """Price suggestion and weather advice for one region, fetched together."""
    run_async(_handler().handle_dashboard(lat, lng, crop, as_json=as_json))


@app.command(name="clear-cache")
def clear_cache_command():
    """Removes every cached location."""
    run_async(_handler().handle_clear_cache())


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()

"""Console rendering of advisory results using the rich library."""

import json
import logging
from typing import Any, Dict, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from agrohub.domain.interfaces.user_interface import UserInterface
from agrohub.domain.models.advisory import (
    DashboardInsights, LocationInfo, PriceSuggestion, ResolutionOutcome, ResolutionSource, WeatherAdvice,
)

logger = logging.getLogger(__name__)

_SOURCE_STYLES = {
    ResolutionSource.UPSTREAM: ("live", "green"),
    ResolutionSource.CACHE: ("cached", "cyan"),
    ResolutionSource.FALLBACK: ("fallback", "yellow"),
}

_RISK_STYLES = {"low": "green", "medium": "yellow", "high": "red"}


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def _source_badge(self, source: ResolutionSource, used_fallback: bool = False) -> str:
        if used_fallback:
            source = ResolutionSource.FALLBACK
        label, color = _SOURCE_STYLES[source]
        return f"[{color}]{label}[/{color}]"

    def _location_table(self, location: LocationInfo) -> Table:
        table = Table(box=SIMPLE, show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Country", Text(location.country))
        table.add_row("Region", Text(location.region_name))
        table.add_row("Currency", Text(f"{location.currency_code} ({location.currency_symbol})"))
        return table

    def _price_table(self, price: PriceSuggestion) -> Table:
        table = Table(box=SIMPLE, show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Suggested price", Text(price.suggested_price, style="bold green"))
        table.add_row("Reasoning", Text(price.reasoning))
        table.add_row("Trends", Text(price.trends))
        return table

    def _weather_table(self, weather: WeatherAdvice) -> Table:
        risk_style = _RISK_STYLES.get(weather.risk_level.lower(), "white")
        table = Table(box=SIMPLE, show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Outlook", Text(weather.outlook))
        table.add_row("Risk", Text(weather.risk_level, style=risk_style))
        for index, item in enumerate(weather.advice, start=1):
            table.add_row(f"Advice {index}", Text(item))
        return table

    def display_location(self, outcome: ResolutionOutcome[LocationInfo]) -> None:
        title = f"[bold]Location[/bold] · {self._source_badge(outcome.source)}"
        self.console.print(Panel(self._location_table(outcome.value), title=title, box=ROUNDED))
        if outcome.fallback_reason:
            logger.debug(f"Location fallback reason: {outcome.fallback_reason}")

    def display_price_suggestion(self, outcome: ResolutionOutcome[PriceSuggestion], crop_name: str) -> None:
        title = f"[bold]Price · {escape(crop_name)}[/bold] · {self._source_badge(outcome.source)}"
        self.console.print(Panel(self._price_table(outcome.value), title=title, box=ROUNDED))

    def display_weather_advice(self, outcome: ResolutionOutcome[WeatherAdvice], location: str) -> None:
        title = f"[bold]Weather · {escape(location)}[/bold] · {self._source_badge(outcome.source)}"
        self.console.print(Panel(self._weather_table(outcome.value), title=title, box=ROUNDED))

    def display_dashboard(self, insights: DashboardInsights) -> None:
        header = f"[bold]{escape(insights.region)}[/bold] · {escape(insights.currency)}"
        self.console.print(Panel(Text.from_markup(header), box=SIMPLE))
        price_title = (
            f"[bold]Price · {escape(insights.crop_name)}[/bold] · "
            f"{self._source_badge(ResolutionSource.UPSTREAM, insights.price_used_fallback)}"
        )
        weather_title = (
            f"[bold]Weather[/bold] · "
            f"{self._source_badge(ResolutionSource.UPSTREAM, insights.weather_used_fallback)}"
        )
        self.console.print(Panel(self._price_table(insights.price), title=price_title, box=ROUNDED))
        self.console.print(Panel(self._weather_table(insights.weather), title=weather_title, box=ROUNDED))

    def display_json(self, payload: Dict[str, Any]) -> None:
        # out() skips markup and wrapping so the text stays parseable
        self.console.out(json.dumps(payload, indent=2, ensure_ascii=False), highlight=False)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message with enhanced styling.

        Args:
            info_message: The informational message to display.
        """
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

"""Interface for presenting advisory results to the user.

Allows different UI implementations (console tables, raw JSON).
"""

import abc
from typing import Any, Dict

from ..models.advisory import (
    DashboardInsights, LocationInfo, PriceSuggestion, ResolutionOutcome, WeatherAdvice,
)


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_location(self, outcome: ResolutionOutcome[LocationInfo]) -> None:
        pass

    @abc.abstractmethod
    def display_price_suggestion(self, outcome: ResolutionOutcome[PriceSuggestion], crop_name: str) -> None:
        pass

    @abc.abstractmethod
    def display_weather_advice(self, outcome: ResolutionOutcome[WeatherAdvice], location: str) -> None:
        pass

    @abc.abstractmethod
    def display_dashboard(self, insights: DashboardInsights) -> None:
        pass

    @abc.abstractmethod
    def display_json(self, payload: Dict[str, Any]) -> None:
        """Prints a payload as JSON, for scripting."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user.

        Args:
            info_message: The informational message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

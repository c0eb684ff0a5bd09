"""Weather provider abstractions - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from weather_data import ForecastBundle, PastPrecipitation


class ForecastProviderBase(ABC):
    """Abstract base class for the forecast (required) data provider."""

    @abstractmethod
    def get_forecast(self, lat: float, lon: float) -> ForecastBundle:
        """
        Fetch current conditions and the multi-day forecast.

        Returns:
            ForecastBundle: Current reading, 3-hourly readings and location clock

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class PrecipitationHistoryBase(ABC):
    """Abstract base class for the recent-precipitation (optional) provider."""

    @abstractmethod
    def get_past_precipitation(self, lat: float, lon: float) -> PastPrecipitation:
        """
        Fetch measured precipitation totals for the trailing 24h and 48h.

        Raises:
            PrecipitationHistoryError: If the history cannot be fetched or parsed
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
    pass


class ConfigurationError(WeatherProviderError):
    """Missing credentials or invalid request parameters; never retried."""
    pass


class PrecipitationHistoryError(WeatherProviderError):
    """The optional precipitation history is unavailable."""
    pass

"""Golf weather service with concurrent provider fan-out and caching."""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional, Tuple
from weather_provider import (
    ConfigurationError,
    ForecastProviderBase,
    PrecipitationHistoryBase,
    WeatherProviderError,
)
from weather_data import PastPrecipitation
from forecast_pipeline import GolfForecast, build_forecast
from timeutils import day_key


def validate_coordinates(lat: float, lon: float) -> Tuple[float, float]:
    """Return (lat, lon) as floats, raising ConfigurationError if invalid."""
    try:
        lat_val = float(lat)
        lon_val = float(lon)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid coordinates: {exc}") from exc
    if not -90 <= lat_val <= 90 or not -180 <= lon_val <= 180:
        raise ConfigurationError(f"Coordinates out of range: lat={lat_val}, lon={lon_val}")
    return lat_val, lon_val


class GolfWeatherService:
    """
    Service that fetches provider data and runs the golf forecast pipeline.

    The forecast and the recent-precipitation history are fetched
    concurrently. A forecast failure is fatal for the request; a history
    failure only lowers ground-signal confidence. Results are cached per
    location so repeated lookups don't hammer the APIs (default: 10 minutes).
    There are no retries: a failed call is a missing signal for that request.
    """

    def __init__(
        self,
        forecast_provider: ForecastProviderBase,
        history_provider: Optional[PrecipitationHistoryBase] = None,
        cache_ttl_seconds: int = 600,  # 10 minutes default
    ):
        """
        Initialize golf weather service.

        Args:
            forecast_provider: Required forecast provider
            history_provider: Optional recent-precipitation provider
            cache_ttl_seconds: How long to cache results before fetching new data
        """
        self.forecast_provider = forecast_provider
        self.history_provider = history_provider
        self.cache_ttl_seconds = cache_ttl_seconds

        self._cache: Dict[Tuple[float, float], Tuple[float, GolfForecast]] = {}

    def get_forecast(self, lat: float, lon: float) -> GolfForecast:
        """
        Get the golf forecast for a location, using cache if still fresh.

        Returns:
            GolfForecast: Today view and 5-day outlook (may be cached)

        Raises:
            ConfigurationError: If the coordinates are invalid
            WeatherProviderError: If the forecast provider fails
        """
        lat, lon = validate_coordinates(lat, lon)
        key = (round(lat, 4), round(lon, 4))
        current_time = time.time()

        cached = self._cache.get(key)
        if cached is not None:
            cache_age = current_time - cached[0]
            same_day = day_key(cached[0], cached[1].tz_offset) == day_key(current_time, cached[1].tz_offset)
            if cache_age < self.cache_ttl_seconds and same_day:
                logging.debug(f"Using cached golf forecast for {key} (age: {cache_age:.1f}s, TTL: {self.cache_ttl_seconds}s)")
                return cached[1]
            elif not same_day:
                logging.info(f"Local day rolled over for {key}, fetching new data")
            else:
                logging.info(f"Cache expired for {key} (age: {cache_age:.1f}s > TTL: {self.cache_ttl_seconds}s), fetching new data")
            del self._cache[key]

        logging.info(f"Fetching forecast and precipitation history for lat={lat} lon={lon}")
        with ThreadPoolExecutor(max_workers=2) as pool:
            forecast_future = pool.submit(self.forecast_provider.get_forecast, lat, lon)
            history_future = pool.submit(self._fetch_history, lat, lon)
            bundle = forecast_future.result()
            past_precip = history_future.result()

        forecast = build_forecast(bundle, past_precip, now=int(current_time))
        self._prune_cache(current_time)
        self._cache[key] = (current_time, forecast)
        return forecast

    def _prune_cache(self, current_time: float) -> None:
        """Drop entries past their TTL so the cache only holds live locations."""
        expired = [k for k, (fetched, _) in self._cache.items() if current_time - fetched >= self.cache_ttl_seconds]
        for k in expired:
            del self._cache[k]

    def _fetch_history(self, lat: float, lon: float) -> PastPrecipitation:
        """Fetch recent precipitation, degrading to 'unavailable' on failure."""
        if self.history_provider is None:
            logging.debug("No precipitation history provider configured")
            return PastPrecipitation()
        try:
            return self.history_provider.get_past_precipitation(lat, lon)
        except WeatherProviderError as e:
            logging.warning(f"Precipitation history unavailable, using forecast-only ground signal: {e}")
            return PastPrecipitation()

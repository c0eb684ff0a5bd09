"""OpenWeather Current Weather + 5 day / 3 hour Forecast provider implementation."""
import logging
import requests
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional, Tuple
from weather_provider import ConfigurationError, ForecastProviderBase, WeatherProviderError
from weather_data import ForecastBundle, LocationContext, WeatherReading
from timeutils import ms_to_kph, round1


class OpenWeatherProvider(ForecastProviderBase):
    """
    Forecast provider using the free OpenWeather APIs.

    Current Weather: https://openweathermap.org/current
    5 day / 3 hour Forecast: https://openweathermap.org/forecast5
    Both are requested in metric units; wind arrives in m/s and is
    converted to km/h here so the rest of the code never sees m/s.
    """

    CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
    FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
    MAX_BLOCKS = 40  # 5 days x 8 three-hour blocks

    def __init__(
        self,
        api_key: str,
        lang: str = "en",
        timeout: int = 10
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            lang: Language code for descriptions (e.g., "en", "de")
            timeout: HTTP request timeout in seconds

        Raises:
            ConfigurationError: If no API key is given
        """
        if not api_key:
            raise ConfigurationError("Missing OpenWeather API key")
        self.api_key = api_key
        self.lang = lang
        self.timeout = timeout

    def get_forecast(self, lat: float, lon: float) -> ForecastBundle:
        """
        Fetch current conditions and the 5-day forecast concurrently.

        Returns:
            ForecastBundle: Current reading, up to 40 forecast readings and
                the location's UTC offset, sunrise and sunset

        Raises:
            WeatherProviderError: If either request fails or cannot be parsed
        """
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.api_key,
            "units": "metric",
            "lang": self.lang,
        }
        logging.debug(f"Request parameters: lat={lat}, lon={lon}, lang={self.lang}")

        with ThreadPoolExecutor(max_workers=2) as pool:
            current_future = pool.submit(self._request, self.CURRENT_URL, params)
            forecast_future = pool.submit(self._request, self.FORECAST_URL, params)
            current_data = current_future.result()
            forecast_data = forecast_future.result()

        try:
            current, sunrise, sunset, current_tz = self._parse_current(current_data)
            city = forecast_data.get("city") or {}
            city_tz = city.get("timezone")
            tz_offset = int(city_tz) if city_tz is not None else current_tz

            items = forecast_data.get("list")
            if not isinstance(items, list):
                logging.error("Forecast response missing 'list' array")
                raise WeatherProviderError("Forecast response missing 'list' array")
            readings = [self._parse_block(item) for item in items[:self.MAX_BLOCKS]]
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

        if current.is_stale(max_age_seconds=3 * 60 * 60):
            logging.warning(f"Current conditions are old (dt={current.timestamp})")

        location = LocationContext(
            lat=lat,
            lon=lon,
            tz_offset=tz_offset,
            sunrise=sunrise,
            sunset=sunset,
        )
        logging.info(
            f"Successfully parsed forecast: {len(readings)} blocks, {current.temp}°C {current.conditions}, "
            f"tz_offset={tz_offset}"
        )
        return ForecastBundle(location=location, readings=readings, current=current)

    def _request(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            logging.info(f"Making OpenWeather API request: {url}")
            response = requests.get(url, params=params, timeout=self.timeout)
            logging.info(f"API response status: {response.status_code}")

            if not response.ok:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
            if not isinstance(data, dict):
                raise WeatherProviderError(f"Unexpected response type: {type(data).__name__}")
            logging.debug(f"API response data keys: {list(data.keys())}")
            return data

        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}")
        except ValueError as e:
            logging.error(f"Failed to decode API response: {e}")
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

    @staticmethod
    def _condition(data: Dict[str, Any]) -> Optional[str]:
        weather_array = data.get("weather") or []
        if not weather_array:
            return None
        return weather_array[0].get("main")

    @staticmethod
    def _wind(data: Dict[str, Any]) -> Tuple[float, float]:
        wind_data = data.get("wind") or {}
        return ms_to_kph(wind_data.get("speed") or 0.0), ms_to_kph(wind_data.get("gust") or 0.0)

    @staticmethod
    def _precip(data: Dict[str, Any], period: str) -> float:
        """Rain plus snow over the period; missing or null amounts are zero."""
        rain = data.get("rain") or {}
        snow = data.get("snow") or {}
        return float(rain.get(period) or 0.0) + float(snow.get(period) or 0.0)

    @staticmethod
    def _temps(main_data: Dict[str, Any]) -> Tuple[float, float]:
        temp = float(main_data.get("temp") or 0.0)
        feels_like = main_data.get("feels_like")
        return temp, float(feels_like) if feels_like is not None else temp

    def _parse_current(self, data: Dict[str, Any]) -> Tuple[WeatherReading, Optional[int], Optional[int], int]:
        main_data = data.get("main")
        if not main_data:
            raise WeatherProviderError("Response missing 'main' block")

        temp, feels_like = self._temps(main_data)
        wind, gust = self._wind(data)

        reading = WeatherReading(
            timestamp=int(data.get("dt", 0)),
            temp=temp,
            feels_like=feels_like,
            wind_kph=wind,
            gust_kph=gust,
            precip_mm=round1(self._precip(data, "1h")),
            conditions=self._condition(data),
        )

        sys_data = data.get("sys") or {}
        sunrise = int(sys_data.get("sunrise") or 0) or None
        sunset = int(sys_data.get("sunset") or 0) or None
        # Note: Current API uses "timezone" not "timezone_offset"
        return reading, sunrise, sunset, int(data.get("timezone") or 0)

    def _parse_block(self, item: Dict[str, Any]) -> WeatherReading:
        main_data = item["main"]
        temp, feels_like = self._temps(main_data)
        wind, gust = self._wind(item)

        return WeatherReading(
            timestamp=int(item["dt"]),
            temp=temp,
            feels_like=feels_like,
            wind_kph=wind,
            gust_kph=gust,
            precip_mm=round1(self._precip(item, "3h")),
            conditions=self._condition(item),
        )

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise WeatherProviderError(
                f"HTTP {response.status_code}: {response.text[:200]}"
            )

        cod = error_data.get("cod", response.status_code)
        message = error_data.get("message", "Unknown error")
        logging.error(f"OpenWeather API error response: {error_data}")
        if str(cod) == "401":
            raise ConfigurationError(f"OpenWeather API error {cod}: {message}")
        raise WeatherProviderError(f"OpenWeather API error {cod}: {message}")

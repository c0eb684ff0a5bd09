"""Open-Meteo recent precipitation provider (no API key required)."""
import logging
import time
import requests
from datetime import datetime, timezone
from typing import Optional, Sequence
from weather_provider import PrecipitationHistoryBase, PrecipitationHistoryError
from weather_data import PastPrecipitation
from timeutils import HOUR_SECONDS, round1


def sum_recent_precipitation(
    times: Sequence[str],
    amounts: Sequence[Optional[float]],
    now: float,
) -> PastPrecipitation:
    """
    Sum hourly precipitation over the trailing 24h and 48h.

    Hours are counted when their age relative to ``now`` is within
    [0, 24] (resp. [0, 48]) hours. Future hours are ignored, unparseable
    timestamps are skipped and missing amounts count as zero.

    Args:
        times: ISO hour strings in UTC without offset, e.g. "2024-05-01T13:00"
        amounts: Precipitation in mm for each hour
        now: Reference UNIX timestamp

    Returns:
        PastPrecipitation: totals rounded to 0.1mm, None where no hour qualified
    """
    sum24 = sum48 = 0.0
    has24 = has48 = False

    for raw_time, raw_mm in zip(times, amounts):
        try:
            hour = datetime.strptime(str(raw_time), "%Y-%m-%dT%H:%M").replace(tzinfo=timezone.utc)
        except ValueError:
            logging.debug(f"Skipping unparseable precipitation time: {raw_time!r}")
            continue
        try:
            mm = float(raw_mm or 0.0)
        except (TypeError, ValueError):
            mm = 0.0

        age_hours = (now - hour.timestamp()) / HOUR_SECONDS
        if 0 <= age_hours <= 24:
            sum24 += mm
            has24 = True
        if 0 <= age_hours <= 48:
            sum48 += mm
            has48 = True

    return PastPrecipitation(
        past24=round1(sum24) if has24 else None,
        past48=round1(sum48) if has48 else None,
    )


class OpenMeteoPrecipitationProvider(PrecipitationHistoryBase):
    """
    Recent precipitation from the Open-Meteo forecast API.

    OpenWeather's free endpoints don't expose trailing precipitation, so
    the hourly series with ``past_days=3`` is used strictly for totals.
    """

    BASE_URL = "https://api.open-meteo.com/v1/forecast"

    def __init__(self, timeout: int = 10, base_url: Optional[str] = None):
        """
        Args:
            timeout: HTTP request timeout in seconds
            base_url: Override for the Open-Meteo forecast endpoint
        """
        self.timeout = timeout
        self.base_url = base_url or self.BASE_URL

    def get_past_precipitation(self, lat: float, lon: float) -> PastPrecipitation:
        params = {
            "latitude": lat,
            "longitude": lon,
            "hourly": "precipitation",
            "past_days": 3,
            "forecast_days": 1,
            "timezone": "UTC",
        }

        try:
            logging.info(f"Making Open-Meteo precipitation request: {self.base_url}")
            response = requests.get(
                self.base_url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            logging.info(f"Open-Meteo response status: {response.status_code}")
            if not response.ok:
                raise PrecipitationHistoryError(f"HTTP {response.status_code} from Open-Meteo")
            data = response.json()
        except requests.exceptions.RequestException as e:
            logging.warning(f"Network error during Open-Meteo request: {e}")
            raise PrecipitationHistoryError(f"Network error: {str(e)}")
        except ValueError as e:
            raise PrecipitationHistoryError(f"Failed to parse response: {str(e)}")

        hourly = data.get("hourly") if isinstance(data, dict) else None
        times = (hourly or {}).get("time")
        amounts = (hourly or {}).get("precipitation")
        if not isinstance(times, list) or not isinstance(amounts, list) or len(times) != len(amounts) or not times:
            raise PrecipitationHistoryError("Open-Meteo response missing hourly precipitation series")

        past = sum_recent_precipitation(times, amounts, time.time())
        logging.info(f"Recent precipitation: past24={past.past24}mm past48={past.past48}mm")
        return past

"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass, field
from typing import List, Optional
import time

# Probability proxies used when a provider reports amounts but no probability
WET_POP_PROXY = 0.7
DRY_POP_PROXY = 0.1


@dataclass(frozen=True)
class WeatherReading:
    """One provider timestamp, normalized to metric units (°C, km/h, mm)."""
    timestamp: int  # UNIX timestamp (UTC)
    temp: float
    feels_like: float
    wind_kph: float = 0.0
    gust_kph: float = 0.0
    precip_mm: float = 0.0  # rain + snow over the reading's interval
    conditions: Optional[str] = None  # e.g., "Clouds", "Rain", "Thunderstorm"
    pop: Optional[float] = None  # probability of precipitation 0..1, if supplied
    has_alert: bool = False

    @property
    def precip_probability(self) -> float:
        """Supplied probability, or a proxy derived from the measured amount."""
        if self.pop is not None:
            return self.pop
        return WET_POP_PROXY if self.precip_mm > 0 else DRY_POP_PROXY

    def is_stale(self, max_age_seconds: int = 900) -> bool:
        """Check if this reading is older than max_age_seconds."""
        current_time = int(time.time())
        age = current_time - self.timestamp
        return age > max_age_seconds


@dataclass(frozen=True)
class LocationContext:
    """Where the forecast is for, and that location's clock."""
    lat: float
    lon: float
    tz_offset: int = 0  # Offset from UTC in seconds, of the location
    sunrise: Optional[int] = None  # UNIX timestamp for the current local day
    sunset: Optional[int] = None


@dataclass
class ForecastBundle:
    """Everything the forecast provider returns for one request."""
    location: LocationContext
    readings: List[WeatherReading] = field(default_factory=list)  # chronological, ~3h apart
    current: Optional[WeatherReading] = None


@dataclass(frozen=True)
class PastPrecipitation:
    """Measured trailing precipitation totals in mm (None when unknown)."""
    past24: Optional[float] = None
    past48: Optional[float] = None

    @property
    def available(self) -> bool:
        return self.past48 is not None

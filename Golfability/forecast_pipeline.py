"""Multi-day golf forecast: scoring, grouping, windows and ground signals.

The pipeline is synchronous and pure. Provider I/O happens before it runs
(see weather_service) and everything it needs arrives as a ForecastBundle
plus optional measured precipitation.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from golfability import GolfScore, golfability_score, infer_season
from ground import GroundSignal, estimate_ground, estimate_ground_from_forecast, forecast_wetness
from tee_window import (
    Daylight,
    ScoredBlock,
    TeeWindow,
    aggregate_day,
    best_block,
    compute_daylight,
    day_window,
)
from timeutils import day_key, format_day, format_time, local_hour, local_month, round1, round_half_up
from weather_data import ForecastBundle, PastPrecipitation, WeatherReading

MAX_DAYS = 5


@dataclass
class DailySummary:
    date_key: str
    day_label: str
    min_temp: int
    max_temp: int
    wind_max: int
    gust_max: int
    precip_total_mm: float
    conditions: Optional[str]
    golf: GolfScore
    best_window: Optional[TeeWindow]
    ground: GroundSignal
    blocks: List[ScoredBlock] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "dateKey": self.date_key,
            "dayLabel": self.day_label,
            "minTemp": self.min_temp,
            "maxTemp": self.max_temp,
            "windMax": self.wind_max,
            "gustMax": self.gust_max,
            "precipTotalMm": self.precip_total_mm,
            "conditions": self.conditions,
            "golf": self.golf.to_dict(),
            "bestWindow": self.best_window.to_dict() if self.best_window else None,
            "ground": self.ground.to_dict(),
            "blocks": [b.to_dict() for b in self.blocks],
        }


@dataclass
class GolfForecast:
    """The full result for one location: today view plus the 5-day outlook."""
    tz_offset: int
    daylight: Daylight
    current: Optional[WeatherReading] = None
    best_block: Optional[ScoredBlock] = None
    best_window: Optional[TeeWindow] = None
    ground: Optional[GroundSignal] = None
    blocks: List[ScoredBlock] = field(default_factory=list)
    daily: List[DailySummary] = field(default_factory=list)

    @property
    def golf(self) -> Optional[GolfScore]:
        """Today's score, taken from the best tee block rather than 'now'."""
        return self.best_block.golf if self.best_block else None

    def to_dict(self) -> dict:
        current = None
        if self.current is not None:
            current = {
                "temp": round_half_up(self.current.temp),
                "feels": round_half_up(self.current.feels_like),
                "windKph": round_half_up(self.current.wind_kph),
                "gustKph": round_half_up(self.current.gust_kph),
                "conditions": self.current.conditions,
            }
        return {
            "current": current,
            "golf": self.golf.to_dict() if self.golf else None,
            "bestTime": {
                "bestBlock": self.best_block.to_dict() if self.best_block else None,
                "bestWindow": self.best_window.to_dict() if self.best_window else None,
            },
            "daylight": self.daylight.to_dict(self.tz_offset),
            "forecast": [b.to_dict() for b in self.blocks],
            "daily": [d.to_dict() for d in self.daily],
            "ground": self.ground.to_dict() if self.ground else None,
        }


def score_blocks(bundle: ForecastBundle, daylight: Daylight, now: int) -> List[ScoredBlock]:
    """
    Score every reading and tag it with location-local fields.

    The season comes from the location's latitude and its current local
    month. Only today's golf daylight is known, so later days never carry
    the in-daylight flag.
    """
    loc = bundle.location
    season = infer_season(loc.lat, local_month(now, loc.tz_offset))
    logging.debug(f"Scoring {len(bundle.readings)} readings (season={season.value})")

    blocks = []
    for reading in bundle.readings:
        ts = reading.timestamp
        blocks.append(ScoredBlock(
            reading=reading,
            golf=golfability_score(reading, season),
            day_key=day_key(ts, loc.tz_offset),
            day_label=format_day(ts, loc.tz_offset),
            label=format_time(ts, loc.tz_offset),
            local_hour=local_hour(ts, loc.tz_offset),
            in_daylight=daylight.contains(ts),
            tz_offset=loc.tz_offset,
        ))
    return blocks


def group_by_day(blocks: List[ScoredBlock]) -> Dict[str, List[ScoredBlock]]:
    """Group blocks by local day key, keeping first-seen day order."""
    grouped: Dict[str, List[ScoredBlock]] = {}
    for block in blocks:
        grouped.setdefault(block.day_key, []).append(block)
    return grouped


def flatten_days(grouped: Dict[str, List[ScoredBlock]]) -> List[ScoredBlock]:
    return [block for day in grouped.values() for block in day]


def summarize_day(
    key: str,
    day_blocks: List[ScoredBlock],
    ground: GroundSignal,
    daylight: Daylight,
    is_today: bool,
) -> DailySummary:
    golf = aggregate_day(day_blocks)
    representative = day_blocks[len(day_blocks) // 2]
    return DailySummary(
        date_key=key,
        day_label=day_blocks[0].day_label,
        min_temp=min(b.temp for b in day_blocks),
        max_temp=max(b.temp for b in day_blocks),
        wind_max=max(b.wind_kph for b in day_blocks),
        gust_max=max(b.gust_kph for b in day_blocks),
        precip_total_mm=round1(sum(b.reading.precip_mm or 0.0 for b in day_blocks)),
        conditions=representative.reading.conditions,
        golf=golf,
        best_window=day_window(day_blocks, golf, daylight, is_today),
        ground=ground,
        blocks=list(day_blocks),
    )


def build_forecast(
    bundle: ForecastBundle,
    past_precip: Optional[PastPrecipitation] = None,
    now: Optional[int] = None,
) -> GolfForecast:
    """
    Build the golf forecast for one location.

    Args:
        bundle: Parsed forecast provider response
        past_precip: Measured trailing precipitation; None or empty means unavailable
        now: UNIX timestamp defining "today" (defaults to the current time)

    Returns:
        GolfForecast: empty daily list and no today view if there are no readings
    """
    now = int(time.time()) if now is None else now
    past_precip = past_precip or PastPrecipitation()
    loc = bundle.location
    daylight = compute_daylight(loc.sunrise, loc.sunset)

    blocks = score_blocks(bundle, daylight, now)
    result = GolfForecast(tz_offset=loc.tz_offset, daylight=daylight, current=bundle.current, blocks=blocks)
    if not blocks:
        logging.warning("Forecast contained no readings; returning an empty outlook")
        return result

    today_key = day_key(now, loc.tz_offset)
    grouped = group_by_day(blocks)
    today_blocks = grouped.get(today_key, [])

    result.ground = estimate_ground(past_precip.past24, past_precip.past48, today_blocks)
    result.best_block = best_block(today_blocks, daylight, is_today=True)
    if result.best_block is not None:
        result.best_window = TeeWindow.from_block(result.best_block)

    for key in list(grouped)[:MAX_DAYS]:
        day_blocks = grouped[key]
        is_today = key == today_key
        if is_today:
            ground = result.ground
        else:
            ground = estimate_ground_from_forecast(forecast_wetness(blocks, day_blocks), day_blocks)
        result.daily.append(summarize_day(key, day_blocks, ground, daylight, is_today))

    logging.info(
        f"Built {len(result.daily)}-day golf outlook: today="
        f"{result.golf.verdict.value if result.golf else 'n/a'}, "
        f"ground confidence={result.ground.greens_speed.confidence.value}"
    )
    return result

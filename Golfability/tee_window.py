"""Golf daylight, tee-window selection and day-level aggregation."""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from golfability import GolfScore, Verdict, verdict_for_score
from timeutils import HOUR_SECONDS, format_time, round_half_up
from weather_data import WeatherReading

# A round takes one 3-hour forecast block
WINDOW_SECONDS = 3 * HOUR_SECONDS
# Golf daylight starts an hour after sunrise and ends an hour before sunset
DAYLIGHT_MARGIN_SECONDS = HOUR_SECONDS
# Tee times start 6am-3pm local so a round finishes by 6pm
FIRST_TEE_HOUR = 6
LAST_TEE_HOUR = 15

DAY_REASONS = {
    Verdict.GREEN: "Great golf day",
    Verdict.YELLOW: "Playable, not perfect",
    Verdict.RED: "Not golfable",
}


@dataclass(frozen=True)
class ScoredBlock:
    """A reading with its score and location-local derived fields."""
    reading: WeatherReading
    golf: GolfScore
    day_key: str  # YYYY-MM-DD in location time
    day_label: str  # e.g., "Sat"
    label: str  # e.g., "9:00 AM"
    local_hour: int
    in_daylight: bool
    tz_offset: int = 0

    @property
    def timestamp(self) -> int:
        return self.reading.timestamp

    @property
    def score(self) -> int:
        return self.golf.score

    @property
    def temp(self) -> int:
        return round_half_up(self.reading.temp)

    @property
    def wind_kph(self) -> int:
        return round_half_up(self.reading.wind_kph)

    @property
    def gust_kph(self) -> int:
        return round_half_up(self.reading.gust_kph)

    def to_dict(self) -> dict:
        return {
            "dt": self.timestamp,
            "label": self.label,
            "dayKey": self.day_key,
            "dayLabel": self.day_label,
            "temp": self.temp,
            "feels": round_half_up(self.reading.feels_like),
            "windKph": self.wind_kph,
            "gustKph": self.gust_kph,
            "precipMm": self.reading.precip_mm,
            "conditions": self.reading.conditions,
            "inDaylight": self.in_daylight,
            "golf": self.golf.to_dict(),
        }


@dataclass(frozen=True)
class Daylight:
    """Sunrise/sunset and the golf-daylight interval derived from them."""
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    start: Optional[int] = None
    end: Optional[int] = None

    @property
    def known(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, timestamp: int) -> bool:
        return self.known and self.start <= timestamp <= self.end

    def to_dict(self, tz_offset: int = 0) -> dict:
        def label(ts):
            return format_time(ts, tz_offset) if ts is not None else None

        return {
            "sunrise": self.sunrise,
            "sunset": self.sunset,
            "sunriseLabel": label(self.sunrise),
            "sunsetLabel": label(self.sunset),
            "daylightStartLabel": label(self.start),
            "daylightEndLabel": label(self.end),
        }


@dataclass(frozen=True)
class TeeWindow:
    start: int
    end: int
    avg_score: int
    start_label: str = ""
    end_label: str = ""

    @classmethod
    def from_block(cls, block: ScoredBlock) -> "TeeWindow":
        end = block.timestamp + WINDOW_SECONDS
        return cls(
            start=block.timestamp,
            end=end,
            avg_score=block.score,
            start_label=block.label,
            end_label=format_time(end, block.tz_offset),
        )

    def to_dict(self) -> dict:
        return {
            "startDt": self.start,
            "startLabel": self.start_label,
            "endDt": self.end,
            "endLabel": self.end_label,
            "avgScore": self.avg_score,
        }


def compute_daylight(sunrise: Optional[int] = None, sunset: Optional[int] = None) -> Daylight:
    """
    Golf daylight is [sunrise + 1h, sunset - 1h].

    Providers report missing sunrise/sunset as 0, which is treated the
    same as None: the interval is unknown.
    """
    if not sunrise or not sunset:
        return Daylight(sunrise=sunrise or None, sunset=sunset or None)
    return Daylight(
        sunrise=sunrise,
        sunset=sunset,
        start=sunrise + DAYLIGHT_MARGIN_SECONDS,
        end=sunset - DAYLIGHT_MARGIN_SECONDS,
    )


def eligible_pool(blocks: Sequence[ScoredBlock]) -> List[ScoredBlock]:
    """Daylight-flagged blocks if the day has any, otherwise every block."""
    daylight = [b for b in blocks if b.in_daylight]
    return daylight if daylight else list(blocks)


def tee_candidates(
    blocks: Sequence[ScoredBlock],
    daylight: Optional[Daylight] = None,
    is_today: bool = False,
) -> List[ScoredBlock]:
    """
    Blocks a round may start in.

    The start hour must fall in [6, 15] local. For today, when golf
    daylight is known, the 3-hour round must also finish by its end.
    Future days have no authoritative sunset and only get the hour check.
    """
    latest_start = None
    if is_today and daylight is not None and daylight.known:
        latest_start = daylight.end - WINDOW_SECONDS

    candidates = []
    for block in eligible_pool(blocks):
        if not FIRST_TEE_HOUR <= block.local_hour <= LAST_TEE_HOUR:
            continue
        if latest_start is not None and block.timestamp > latest_start:
            continue
        candidates.append(block)
    return candidates


def best_block(
    blocks: Sequence[ScoredBlock],
    daylight: Optional[Daylight] = None,
    is_today: bool = False,
) -> Optional[ScoredBlock]:
    """Highest-scoring tee candidate; the earliest one wins ties."""
    best = None
    for block in tee_candidates(blocks, daylight, is_today):
        if best is None or block.score > best.score:
            best = block
    return best


def select_best_window(
    blocks: Sequence[ScoredBlock],
    sunrise: Optional[int] = None,
    sunset: Optional[int] = None,
    is_today: bool = False,
) -> Optional[TeeWindow]:
    """
    Pick the best 3-hour tee window for one day's blocks.

    Args:
        blocks: The day's scored blocks, chronological
        sunrise: UNIX timestamp, only meaningful for today
        sunset: UNIX timestamp, only meaningful for today
        is_today: Whether to clamp the window to finish before dusk

    Returns:
        TeeWindow, or None when no block is eligible
    """
    daylight = compute_daylight(sunrise, sunset)
    block = best_block(blocks, daylight, is_today)
    return TeeWindow.from_block(block) if block is not None else None


def aggregate_day(blocks: Sequence[ScoredBlock]) -> GolfScore:
    """Mean score over the day's eligible pool, with a day-level verdict."""
    pool = eligible_pool(blocks)
    if not pool:
        return GolfScore(0, Verdict.RED, DAY_REASONS[Verdict.RED])

    avg = round_half_up(sum(b.score for b in pool) / len(pool))
    verdict = verdict_for_score(avg)
    return GolfScore(avg, verdict, DAY_REASONS[verdict])


def day_window(
    blocks: Sequence[ScoredBlock],
    day_score: GolfScore,
    daylight: Optional[Daylight] = None,
    is_today: bool = False,
) -> Optional[TeeWindow]:
    """Best window for a day; a RED day never gets one."""
    if day_score.verdict == Verdict.RED:
        return None
    block = best_block(blocks, daylight, is_today)
    return TeeWindow.from_block(block) if block is not None else None

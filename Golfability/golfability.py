"""Golfability scoring - pure functions mapping a weather reading to a verdict.

Nothing in here does I/O. Every reading yields exactly one GolfScore.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from timeutils import round_half_up
from weather_data import WeatherReading


class Verdict(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


class Season(str, Enum):
    WINTER = "WINTER"
    SHOULDER = "SHOULDER"
    SUMMER = "SUMMER"


@dataclass(frozen=True)
class GolfScore:
    """Score 0-100 with its verdict and a short human-readable reason."""
    score: int
    verdict: Verdict
    reason: str
    season: Optional[Season] = None

    def to_dict(self) -> dict:
        data = {
            "score": self.score,
            "verdict": self.verdict.value,
            "reason": self.reason,
        }
        if self.season is not None:
            data["season"] = self.season.value
        return data


GREEN_MIN_SCORE = 80
YELLOW_MIN_SCORE = 55

# Tunable thresholds (°C, feels-like)
WINTER_MIN_FEELS_LIKE_C = 5
ABSOLUTE_MIN_FEELS_LIKE_C = -2

THUNDERSTORM_PATTERN = re.compile(r"thunderstorm", re.IGNORECASE)
SNOW_PATTERN = re.compile(r"snow", re.IGNORECASE)

# (minimum value, penalty), checked top-down; only the first match applies
POP_PENALTIES = ((0.8, 40), (0.6, 30), (0.4, 18), (0.2, 8))
PRECIP_MM_PENALTIES = ((5, 12), (1, 6))
WIND_PENALTIES = ((50, 28), (40, 22), (30, 14), (20, 8), (15, 3))
GUST_WEIGHT = 0.8

# Meteorological seasons by month index (0 = January), northern hemisphere
NORTHERN_WINTER_MONTHS = frozenset({11, 0, 1})
NORTHERN_SUMMER_MONTHS = frozenset({5, 6, 7})

REASONS = {
    Verdict.GREEN: "Great golf weather",
    Verdict.YELLOW: "Playable, but not perfect",
    Verdict.RED: "Not really golf weather",
}


def verdict_for_score(score: float) -> Verdict:
    """Map a score to its verdict: >=80 GREEN, >=55 YELLOW, else RED."""
    if score >= GREEN_MIN_SCORE:
        return Verdict.GREEN
    if score >= YELLOW_MIN_SCORE:
        return Verdict.YELLOW
    return Verdict.RED


def infer_season(latitude: Optional[float] = None, month: Optional[int] = None) -> Season:
    """
    Infer the season from hemisphere and month.

    Args:
        latitude: Degrees north; None assumes the northern hemisphere
        month: Month index 0-11 (0 = January); None means unknown

    Returns:
        Season: SHOULDER when the month is unknown
    """
    if month is None:
        return Season.SHOULDER

    northern = latitude is None or latitude >= 0
    winter_months = NORTHERN_WINTER_MONTHS if northern else NORTHERN_SUMMER_MONTHS
    summer_months = NORTHERN_SUMMER_MONTHS if northern else NORTHERN_WINTER_MONTHS

    if month in winter_months:
        return Season.WINTER
    if month in summer_months:
        return Season.SUMMER
    return Season.SHOULDER


def _banded_penalty(value: float, bands) -> float:
    for minimum, penalty in bands:
        if value >= minimum:
            return penalty
    return 0


def _temperature_penalty(feels_like: float, season: Season) -> float:
    summer = season == Season.SUMMER
    if feels_like < 0:
        return 35 if summer else 40
    if feels_like < 5:
        return 25 if summer else 30
    if feels_like < 10:
        return 10
    if feels_like > 32:
        return 18
    return 0


def golfability_score(reading: WeatherReading, season: Season = Season.SHOULDER) -> GolfScore:
    """
    Score a single reading for golf.

    Hard stops are checked first, in order, and short-circuit:
    alert, thunderstorm, absolute cold, snow, then the winter clamp.
    Otherwise the score starts at 100 and loses points for rain risk,
    rain amount, wind and temperature.

    Args:
        reading: Normalized weather reading
        season: Season used for the cold-weather thresholds

    Returns:
        GolfScore: score 0-100, verdict and reason
    """
    conditions = reading.conditions or ""
    feels_like = reading.feels_like

    if reading.has_alert:
        return GolfScore(0, Verdict.RED, "Weather alert in effect", season)
    if THUNDERSTORM_PATTERN.search(conditions):
        return GolfScore(0, Verdict.RED, "Thunderstorms — hard no", season)
    if feels_like <= ABSOLUTE_MIN_FEELS_LIKE_C:
        return GolfScore(10, Verdict.RED, "Too cold to be playable", season)
    if SNOW_PATTERN.search(conditions):
        return GolfScore(15, Verdict.RED, "Snowing / winter conditions", season)
    if season == Season.WINTER and feels_like < WINTER_MIN_FEELS_LIKE_C:
        return GolfScore(25, Verdict.RED, "Winter conditions — not golf weather", season)

    score = 100.0
    score -= _banded_penalty(reading.precip_probability, POP_PENALTIES)
    score -= _banded_penalty(reading.precip_mm or 0.0, PRECIP_MM_PENALTIES)

    effective_wind = max(reading.wind_kph or 0.0, (reading.gust_kph or 0.0) * GUST_WEIGHT)
    score -= _banded_penalty(effective_wind, WIND_PENALTIES)

    score -= _temperature_penalty(feels_like, season)

    final = max(0, min(100, round_half_up(score)))
    verdict = verdict_for_score(final)
    return GolfScore(final, verdict, REASONS[verdict], season)


def score_reading(
    reading: WeatherReading,
    latitude: Optional[float] = None,
    month: Optional[int] = None,
) -> GolfScore:
    """Infer the season for (latitude, month) and score the reading."""
    return golfability_score(reading, infer_season(latitude, month))

"""Ground-condition proxies: greens speed and fairway rollout.

These are heuristics from recent rain plus a heat/wind drying index, not
turf physics. Measured trailing precipitation gives MEDIUM confidence; a
forecast-derived wetness proxy, or no data at all, gives LOW.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from tee_window import ScoredBlock, eligible_pool
from timeutils import HOUR_SECONDS, round1, round_half_up

WETNESS_WINDOW_SECONDS = 48 * HOUR_SECONDS
MIDDAY_HOUR = 12


class Confidence(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class GreensSpeed(str, Enum):
    SLOW = "SLOW"
    MEDIUM = "MEDIUM"
    QUICK = "QUICK"


class Rollout(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


GREENS_LABELS = {
    GreensSpeed.SLOW: "Greens speed: 🟢 Slow",
    GreensSpeed.MEDIUM: "Greens speed: 🟡 Medium",
    GreensSpeed.QUICK: "Greens speed: 🔴 Quick",
}

ROLLOUT_LABELS = {
    Rollout.LOW: "Fairway rollout: 🟢 Low",
    Rollout.MEDIUM: "Fairway rollout: 🟡 Medium",
    Rollout.HIGH: "Fairway rollout: 🔴 High",
}


@dataclass(frozen=True)
class GroundEstimate:
    key: Union[GreensSpeed, Rollout]
    label: str
    detail: str
    confidence: Confidence

    def to_dict(self) -> dict:
        return {
            "key": self.key.value,
            "label": self.label,
            "detail": self.detail,
            "confidence": self.confidence.value,
        }


@dataclass(frozen=True)
class GroundSignal:
    greens_speed: GroundEstimate
    fairway_rollout: GroundEstimate
    past24: Optional[float] = None  # measured mm
    past48: Optional[float] = None  # measured mm
    forecast_wetness: Optional[float] = None  # forecast proxy mm, prior 48h

    @property
    def is_forecast_proxy(self) -> bool:
        return self.forecast_wetness is not None

    def to_dict(self) -> dict:
        return {
            "past24hPrecipMm": self.past24,
            "past48hPrecipMm": self.past48,
            "forecast48hWetnessMm": self.forecast_wetness,
            "greensSpeed": self.greens_speed.to_dict(),
            "fairwayRollout": self.fairway_rollout.to_dict(),
        }


@dataclass(frozen=True)
class DryingIndex:
    """Heat + wind drying proxy: 0 around 8°C/5 km/h, ~2 at 20°C/25 km/h."""
    avg_temp: int
    avg_wind: int
    heat: float
    wind: float

    @property
    def value(self) -> float:
        return self.heat + self.wind


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def drying_index(blocks: Sequence[ScoredBlock]) -> DryingIndex:
    """Drying index over the day's daylight blocks (all blocks if none)."""
    pool = eligible_pool(blocks)

    def avg(values):
        return sum(values) / len(values) if values else 0

    avg_temp = round_half_up(avg([b.temp for b in pool]))
    avg_wind = round_half_up(avg([b.wind_kph for b in pool]))
    return DryingIndex(
        avg_temp=avg_temp,
        avg_wind=avg_wind,
        heat=_clamp((avg_temp - 8) / 12, 0, 1.5),
        wind=_clamp((avg_wind - 5) / 20, 0, 1.0),
    )


def _greens(key: GreensSpeed, detail: str, confidence: Confidence) -> GroundEstimate:
    return GroundEstimate(key, GREENS_LABELS[key], detail, confidence)


def _rollout(key: Rollout, detail: str, confidence: Confidence) -> GroundEstimate:
    return GroundEstimate(key, ROLLOUT_LABELS[key], detail, confidence)


def _unavailable_signal(past24: Optional[float], past48: Optional[float]) -> GroundSignal:
    return GroundSignal(
        greens_speed=_greens(
            GreensSpeed.MEDIUM,
            "Using forecast-only signal (recent rain data unavailable).",
            Confidence.LOW,
        ),
        fairway_rollout=_rollout(Rollout.MEDIUM, "Some rollout, but not summer-firm.", Confidence.LOW),
        past24=past24,
        past48=past48,
    )


def _measured_signal(past24: Optional[float], past48: float, drying: DryingIndex) -> GroundSignal:
    conf = Confidence.MEDIUM

    if past48 >= 10 and drying.value < 1.0:
        greens = _greens(GreensSpeed.SLOW, f"Likely slower: {past48}mm in last 48h and limited drying.", conf)
    elif past48 >= 6 and drying.value < 0.8:
        greens = _greens(GreensSpeed.SLOW, f"Leaning slow: {past48}mm in last 48h, cool/wet feel.", conf)
    elif past48 <= 2 and drying.avg_temp >= 14 and drying.value >= 1.0:
        greens = _greens(GreensSpeed.QUICK, f"Likely quicker: dry last 48h ({past48}mm) with decent drying.", conf)
    else:
        greens = _greens(GreensSpeed.MEDIUM, f"Normal-ish: {past48}mm in last 48h with some drying.", conf)

    if past48 >= 12:
        rollout = _rollout(Rollout.LOW, f"Low rollout / plug risk up: {past48}mm in last 48h.", conf)
    elif past48 <= 2 and drying.avg_temp >= 10 and drying.value >= 1.0:
        rollout = _rollout(Rollout.HIGH, f"More rollout likely: dry last 48h ({past48}mm) + drying breeze.", conf)
    else:
        rollout = _rollout(Rollout.MEDIUM, f"Moderate rollout: {past48}mm last 48h.", conf)

    return GroundSignal(greens_speed=greens, fairway_rollout=rollout, past24=past24, past48=past48)


def _proxy_signal(wetness: float, drying: DryingIndex) -> GroundSignal:
    conf = Confidence.LOW
    mm = round1(wetness)

    if wetness >= 10 and drying.value < 1.0:
        greens = _greens(GreensSpeed.SLOW, f"Leaning slow: ~{mm}mm in the prior 48h + limited drying.", conf)
    elif wetness <= 2 and drying.avg_temp >= 14 and drying.value >= 1.0:
        greens = _greens(GreensSpeed.QUICK, f"Leaning quicker: ~{mm}mm prior 48h with good drying.", conf)
    else:
        greens = _greens(GreensSpeed.MEDIUM, f"Normal-ish: ~{mm}mm prior 48h with some drying.", conf)

    if wetness >= 12:
        rollout = _rollout(Rollout.LOW, f"Low rollout likely: ~{mm}mm prior 48h (plug risk).", conf)
    elif wetness <= 2 and drying.avg_temp >= 10 and drying.value >= 1.0:
        rollout = _rollout(Rollout.HIGH, f"More rollout likely: ~{mm}mm prior 48h + drying breeze.", conf)
    else:
        rollout = _rollout(Rollout.MEDIUM, f"Moderate rollout: ~{mm}mm prior 48h.", conf)

    return GroundSignal(greens_speed=greens, fairway_rollout=rollout, forecast_wetness=mm)


def estimate_ground(
    past24: Optional[float],
    past48: Optional[float],
    day_blocks: Sequence[ScoredBlock],
    is_forecast_proxy: bool = False,
) -> GroundSignal:
    """
    Classify greens speed and fairway rollout for one day.

    Args:
        past24: Measured mm over the trailing 24h (ignored in proxy mode)
        past48: Trailing 48h mm, measured or, in proxy mode, forecast-derived
        day_blocks: The day's scored blocks, used for the drying index
        is_forecast_proxy: past48 is a forecast wetness proxy

    Returns:
        GroundSignal: LOW confidence throughout in proxy mode or without data
    """
    if past48 is None:
        return _unavailable_signal(None if is_forecast_proxy else past24, None)

    drying = drying_index(day_blocks)
    if is_forecast_proxy:
        return _proxy_signal(past48, drying)
    return _measured_signal(past24, past48, drying)


def estimate_ground_from_forecast(wetness48: float, day_blocks: Sequence[ScoredBlock]) -> GroundSignal:
    """Ground signal for a future day from forecast wetness alone."""
    return estimate_ground(None, wetness48, day_blocks, is_forecast_proxy=True)


def midday_block(day_blocks: Sequence[ScoredBlock]) -> Optional[ScoredBlock]:
    """The block whose local hour is closest to noon; earliest on ties."""
    best = None
    for block in day_blocks:
        if best is None or abs(block.local_hour - MIDDAY_HOUR) < abs(best.local_hour - MIDDAY_HOUR):
            best = block
    return best


def forecast_wetness(all_blocks: Sequence[ScoredBlock], day_blocks: Sequence[ScoredBlock]) -> float:
    """
    Forecast precipitation in the 48h leading into a day's midday block.

    Sums every forecast block with anchor - 48h <= t < anchor, which may
    include blocks from earlier days.
    """
    anchor = midday_block(day_blocks)
    if anchor is None:
        return 0.0
    end = anchor.timestamp
    start = end - WETNESS_WINDOW_SECONDS
    return sum(b.reading.precip_mm or 0.0 for b in all_blocks if start <= b.timestamp < end)

"""Tests for golf daylight, tee-window selection and day aggregation."""
import pytest
from golfability import GolfScore, Verdict, verdict_for_score
from tee_window import (
    ScoredBlock,
    TeeWindow,
    aggregate_day,
    best_block,
    compute_daylight,
    day_window,
    eligible_pool,
    select_best_window,
)
from timeutils import format_time
from weather_data import WeatherReading

DAY_START = 1721001600  # 2024-07-15 00:00 UTC
HOUR = 3600


def make_block(hour: int, score: int, in_daylight: bool = False) -> ScoredBlock:
    """A block at a local hour on DAY_START (UTC offset 0) with a fixed score."""
    ts = DAY_START + hour * HOUR
    reading = WeatherReading(timestamp=ts, temp=20.0, feels_like=20.0)
    return ScoredBlock(
        reading=reading,
        golf=GolfScore(score, verdict_for_score(score), "test"),
        day_key="2024-07-15",
        day_label="Mon",
        label=format_time(ts, 0),
        local_hour=hour,
        in_daylight=in_daylight,
    )


def test_selects_highest_scoring_block():
    """The 11:00 block scores 92 and everything else is below 80."""
    blocks = [make_block(h, s) for h, s in [(5, 70), (8, 75), (11, 92), (14, 78), (17, 60)]]

    window = select_best_window(blocks)

    assert window is not None
    assert window.start == DAY_START + 11 * HOUR
    assert window.end == window.start + 3 * HOUR
    assert window.avg_score == 92
    assert window.start_label == "11:00 AM"
    assert window.end_label == "2:00 PM"


def test_ties_go_to_earliest_block():
    blocks = [make_block(h, 85) for h in (6, 9, 12, 15)]
    window = select_best_window(blocks)
    assert window.start == DAY_START + 6 * HOUR


def test_tee_hours_are_6_to_15_inclusive():
    """Great weather outside course hours doesn't produce a window."""
    blocks = [make_block(3, 100), make_block(6, 60), make_block(15, 65), make_block(18, 100)]
    window = select_best_window(blocks)
    assert window.start == DAY_START + 15 * HOUR


def test_no_eligible_block_returns_none():
    blocks = [make_block(h, 100) for h in (0, 3, 18, 21)]
    assert select_best_window(blocks) is None
    assert select_best_window([]) is None


def test_daylight_blocks_are_preferred():
    """When any block is in daylight, only daylight blocks are candidates."""
    blocks = [make_block(9, 60, in_daylight=True), make_block(12, 95, in_daylight=False)]

    assert eligible_pool(blocks) == [blocks[0]]
    assert select_best_window(blocks).start == DAY_START + 9 * HOUR


def test_today_window_must_finish_before_dusk():
    """Sunset 18:00 -> golf daylight ends 17:00 -> latest start 14:00."""
    blocks = [make_block(9, 60), make_block(15, 90)]
    sunrise = DAY_START + 5 * HOUR

    clamped = select_best_window(blocks, sunrise, DAY_START + 18 * HOUR, is_today=True)
    assert clamped.start == DAY_START + 9 * HOUR

    relaxed = select_best_window(blocks, sunrise, DAY_START + 19 * HOUR, is_today=True)
    assert relaxed.start == DAY_START + 15 * HOUR


def test_future_days_skip_the_sunset_clamp():
    blocks = [make_block(9, 60), make_block(15, 90)]
    window = select_best_window(blocks, DAY_START + 5 * HOUR, DAY_START + 18 * HOUR, is_today=False)
    assert window.start == DAY_START + 15 * HOUR


def test_today_without_sunset_data_uses_hour_check_only():
    blocks = [make_block(9, 60), make_block(15, 90)]
    window = select_best_window(blocks, None, None, is_today=True)
    assert window.start == DAY_START + 15 * HOUR


def test_compute_daylight():
    daylight = compute_daylight(DAY_START + 5 * HOUR, DAY_START + 20 * HOUR)

    assert daylight.known
    assert daylight.start == DAY_START + 6 * HOUR
    assert daylight.end == DAY_START + 19 * HOUR
    assert daylight.contains(DAY_START + 6 * HOUR)
    assert daylight.contains(DAY_START + 19 * HOUR)
    assert not daylight.contains(DAY_START + 20 * HOUR)


def test_compute_daylight_missing_values():
    """Zero means the provider didn't report it."""
    daylight = compute_daylight(0, 0)

    assert not daylight.known
    assert daylight.sunrise is None
    assert not daylight.contains(DAY_START + 12 * HOUR)
    assert daylight.to_dict()["daylightStartLabel"] is None


def test_daylight_to_dict_labels():
    data = compute_daylight(DAY_START + 5 * HOUR, DAY_START + 20 * HOUR).to_dict(tz_offset=0)
    assert data["sunriseLabel"] == "5:00 AM"
    assert data["sunsetLabel"] == "8:00 PM"
    assert data["daylightStartLabel"] == "6:00 AM"
    assert data["daylightEndLabel"] == "7:00 PM"


def test_aggregate_day_rounds_mean_half_up():
    golf = aggregate_day([make_block(9, 80), make_block(12, 81)])
    assert golf.score == 81
    assert golf.verdict == Verdict.GREEN
    assert golf.reason == "Great golf day"


def test_aggregate_day_uses_daylight_pool():
    blocks = [make_block(3, 0), make_block(9, 70, in_daylight=True), make_block(12, 60, in_daylight=True)]
    golf = aggregate_day(blocks)
    assert golf.score == 65
    assert golf.verdict == Verdict.YELLOW


def test_aggregate_empty_day():
    golf = aggregate_day([])
    assert golf.score == 0
    assert golf.verdict == Verdict.RED


def test_red_day_has_no_window():
    """One warm hour amid a stormy day still gives no recommendation."""
    blocks = [make_block(6, 0), make_block(9, 0), make_block(12, 90), make_block(15, 10)]
    golf = aggregate_day(blocks)

    assert golf.verdict == Verdict.RED
    assert best_block(blocks).score == 90
    assert day_window(blocks, golf) is None


def test_day_window_for_playable_day():
    blocks = [make_block(9, 70), make_block(12, 90)]
    golf = aggregate_day(blocks)
    assert day_window(blocks, golf).avg_score == 90


def test_tee_window_to_dict():
    window = TeeWindow.from_block(make_block(12, 88))
    assert window.to_dict() == {
        "startDt": DAY_START + 12 * HOUR,
        "startLabel": "12:00 PM",
        "endDt": DAY_START + 15 * HOUR,
        "endLabel": "3:00 PM",
        "avgScore": 88,
    }


def test_scored_block_to_dict_rounds_display_fields():
    reading = WeatherReading(
        timestamp=DAY_START, temp=18.5, feels_like=17.4, wind_kph=11.16, gust_kph=20.5,
        precip_mm=0.4, conditions="Clouds",
    )
    block = ScoredBlock(
        reading=reading,
        golf=GolfScore(90, Verdict.GREEN, "Great golf weather"),
        day_key="2024-07-15", day_label="Mon", label="12:00 AM", local_hour=0, in_daylight=False,
    )
    data = block.to_dict()

    assert data["temp"] == 19
    assert data["feels"] == 17
    assert data["windKph"] == 11
    assert data["gustKph"] == 21
    assert data["precipMm"] == pytest.approx(0.4)
    assert data["golf"]["verdict"] == "GREEN"

"""Tests for the command-line entry point."""
import json
import pytest
from unittest.mock import patch
import main
from forecast_pipeline import build_forecast
from weather_data import ForecastBundle, LocationContext, PastPrecipitation, WeatherReading
from weather_provider import ConfigurationError, WeatherProviderError

DAY_START = 1721001600  # 2024-07-15 00:00 UTC
NOW = DAY_START + 8 * 3600


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("OPENWEATHER_API_KEY", "GOLF_LAT", "GOLF_LON", "WEATHER_LANG"):
        monkeypatch.delenv(name, raising=False)
    with patch('main.load_dotenv'):
        yield monkeypatch


@pytest.fixture
def sample_forecast():
    readings = [
        WeatherReading(timestamp=DAY_START + (9 + 3 * i) * 3600, temp=21.0, feels_like=21.0, wind_kph=8.0, conditions="Clear")
        for i in range(40)
    ]
    location = LocationContext(lat=43.65, lon=-79.38, sunrise=DAY_START + 5 * 3600, sunset=DAY_START + 20 * 3600)
    bundle = ForecastBundle(location=location, readings=readings)
    return build_forecast(bundle, PastPrecipitation(0.0, 0.5), now=NOW)


def test_parse_args_defaults():
    args = main.parse_args([])
    assert args.lat is None
    assert args.lon is None
    assert args.format == "json"
    assert args.refresh == 0.0
    assert args.cache_ttl == 600
    assert args.timeout == 10


def test_parse_args_coordinates():
    args = main.parse_args(["--lat", "43.65", "--lon", "-79.38", "--format", "text"])
    assert args.lat == 43.65
    assert args.lon == -79.38
    assert args.format == "text"


def test_load_config_requires_api_key(clean_env):
    with pytest.raises(SystemExit) as exc_info:
        main.load_config(43.65, -79.38)
    assert "OPENWEATHER_API_KEY" in str(exc_info.value)


def test_load_config_requires_coordinates(clean_env):
    clean_env.setenv("OPENWEATHER_API_KEY", "test_key")
    with pytest.raises(SystemExit) as exc_info:
        main.load_config(None, None)
    assert "lat/lon" in str(exc_info.value)


def test_load_config_rejects_bad_coordinates(clean_env):
    clean_env.setenv("OPENWEATHER_API_KEY", "test_key")
    clean_env.setenv("GOLF_LAT", "north")
    clean_env.setenv("GOLF_LON", "-79.38")
    with pytest.raises(SystemExit) as exc_info:
        main.load_config(None, None)
    assert "Invalid coordinates" in str(exc_info.value)


def test_load_config_from_environment(clean_env):
    clean_env.setenv("OPENWEATHER_API_KEY", "test_key")
    clean_env.setenv("GOLF_LAT", "43.65")
    clean_env.setenv("GOLF_LON", "-79.38")
    clean_env.setenv("WEATHER_LANG", "fr")

    assert main.load_config(None, None) == ("test_key", 43.65, -79.38, "fr")


def test_cli_coordinates_override_environment(clean_env):
    clean_env.setenv("OPENWEATHER_API_KEY", "test_key")
    clean_env.setenv("GOLF_LAT", "43.65")
    clean_env.setenv("GOLF_LON", "-79.38")

    _, lat, lon, _ = main.load_config(-33.87, 151.21)
    assert (lat, lon) == (-33.87, 151.21)


def test_render_json(sample_forecast):
    args = main.parse_args([])
    data = json.loads(main.render(sample_forecast, args))
    assert data["golf"]["verdict"] == "GREEN"
    assert len(data["daily"]) == 5


def test_render_text(sample_forecast):
    args = main.parse_args(["--format", "text"])
    text = main.render(sample_forecast, args)
    lines = text.splitlines()

    assert lines[0].startswith("Today: 100 GREEN")
    assert "(tee 9:00 AM-12:00 PM)" in lines[0]
    assert lines[1].startswith("Greens speed:")
    assert lines[2].startswith("Fairway rollout:")
    assert len(lines) == 3 + 5
    assert lines[3].startswith("Mon 2024-07-15")


def test_format_day_line_without_window(sample_forecast):
    day = sample_forecast.daily[1]
    day.best_window = None
    assert "no tee window" in main.format_day_line(day)


def test_main_prints_forecast(clean_env, sample_forecast, capsys):
    clean_env.setenv("OPENWEATHER_API_KEY", "test_key")
    with patch('main.setup_logging'), patch('main.GolfWeatherService.get_forecast', return_value=sample_forecast):
        main.main(["--lat", "43.65", "--lon", "-79.38"])

    data = json.loads(capsys.readouterr().out)
    assert data["bestTime"]["bestWindow"]["startLabel"] == "9:00 AM"


def test_main_fetch_failure_exits(clean_env):
    clean_env.setenv("OPENWEATHER_API_KEY", "test_key")
    error = WeatherProviderError("HTTP 503: unavailable")
    with patch('main.setup_logging'), patch('main.GolfWeatherService.get_forecast', side_effect=error):
        with pytest.raises(SystemExit) as exc_info:
            main.main(["--lat", "43.65", "--lon", "-79.38"])

    assert "Weather fetch failed" in str(exc_info.value)


def test_main_configuration_failure_exits(clean_env):
    clean_env.setenv("OPENWEATHER_API_KEY", "bad_key")
    error = ConfigurationError("OpenWeather API error 401: Invalid API key")
    with patch('main.setup_logging'), patch('main.GolfWeatherService.get_forecast', side_effect=error):
        with pytest.raises(SystemExit) as exc_info:
            main.main(["--lat", "43.65", "--lon", "-79.38"])

    assert "Configuration error" in str(exc_info.value)

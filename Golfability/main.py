"""Golf weather outlook: "is it good enough to golf, and when" for a location."""
import argparse
import json
import logging
import os
import signal
import sys
import time
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from forecast_pipeline import DailySummary, GolfForecast
from openweather_provider import OpenWeatherProvider
from precip_history import OpenMeteoPrecipitationProvider
from weather_provider import ConfigurationError, WeatherProviderError
from weather_service import GolfWeatherService, validate_coordinates

VERDICT_MARKS = {"GREEN": "🟢", "YELLOW": "🟡", "RED": "🔴"}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Golf weather outlook")
    parser.add_argument("--lat", type=float, default=None, help="Latitude (default: GOLF_LAT)")
    parser.add_argument("--lon", type=float, default=None, help="Longitude (default: GOLF_LON)")
    parser.add_argument("--format", choices=["json", "text"], default="json")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent")
    parser.add_argument("--refresh", type=float, default=0.0, help="Seconds between refreshes (0 = run once)")
    parser.add_argument("--cache-ttl", type=int, default=600)
    parser.add_argument("--timeout", type=int, default=10, help="HTTP timeout in seconds")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    # stdout carries the forecast output, so logs go to stderr
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def load_config(lat: Optional[float], lon: Optional[float]) -> Tuple[str, float, float, str]:
    load_dotenv()
    api_key = os.getenv("OPENWEATHER_API_KEY")
    lang = os.getenv("WEATHER_LANG", "en")
    lat = lat if lat is not None else os.getenv("GOLF_LAT")
    lon = lon if lon is not None else os.getenv("GOLF_LON")

    if not api_key:
        raise SystemExit("Missing OPENWEATHER_API_KEY in environment")
    if lat is None or lon is None or lat == "" or lon == "":
        raise SystemExit("Missing lat/lon (use --lat/--lon or GOLF_LAT/GOLF_LON)")

    try:
        lat_val, lon_val = validate_coordinates(lat, lon)
    except ConfigurationError as exc:
        raise SystemExit(str(exc)) from exc

    logging.info("Configuration loaded: lat=%s lon=%s lang=%s", lat_val, lon_val, lang)
    return api_key, lat_val, lon_val, lang


def build_weather_service(api_key: str, lang: str, args: argparse.Namespace) -> GolfWeatherService:
    provider = OpenWeatherProvider(
        api_key=api_key,
        lang=lang,
        timeout=args.timeout,
    )
    history = OpenMeteoPrecipitationProvider(timeout=args.timeout)
    service = GolfWeatherService(
        forecast_provider=provider,
        history_provider=history,
        cache_ttl_seconds=args.cache_ttl,
    )
    logging.info("Golf weather service ready (cache ttl=%ss)", args.cache_ttl)
    return service


def format_day_line(day: DailySummary) -> str:
    mark = VERDICT_MARKS.get(day.golf.verdict.value, "")
    window = day.best_window
    tee = f"best {window.start_label}-{window.end_label}" if window else "no tee window"
    return (
        f"{day.day_label} {day.date_key}  {mark} {day.golf.score:3d} {day.golf.verdict.value:<6}"
        f"  {day.min_temp:+d}/{day.max_temp:+d}°  wind {day.wind_max} gust {day.gust_max} km/h"
        f"  {day.precip_total_mm}mm  {tee}  {day.ground.greens_speed.key.value.lower()} greens"
    )


def format_text(forecast: GolfForecast) -> str:
    lines = []
    if forecast.golf is not None:
        window = forecast.best_window
        lines.append(
            f"Today: {forecast.golf.score} {forecast.golf.verdict.value} - {forecast.golf.reason}"
            + (f" (tee {window.start_label}-{window.end_label})" if window else "")
        )
    else:
        lines.append("Today: no tee window left")
    if forecast.ground is not None:
        lines.append(forecast.ground.greens_speed.label + " - " + forecast.ground.greens_speed.detail)
        lines.append(forecast.ground.fairway_rollout.label + " - " + forecast.ground.fairway_rollout.detail)
    lines.extend(format_day_line(day) for day in forecast.daily)
    return "\n".join(lines)


def render(forecast: GolfForecast, args: argparse.Namespace) -> str:
    if args.format == "text":
        return format_text(forecast)
    return json.dumps(forecast.to_dict(), indent=args.indent, ensure_ascii=False)


def forecast_loop(service: GolfWeatherService, lat: float, lon: float, args: argparse.Namespace) -> None:
    frame = 0
    while True:
        frame += 1
        logging.info("Refresh %s: fetching golf forecast", frame)
        try:
            forecast = service.get_forecast(lat, lon)
            print(render(forecast, args), flush=True)
        except ConfigurationError:
            raise
        except WeatherProviderError as err:
            logging.error("Weather fetch failed: %s", err)

        time.sleep(max(args.refresh, 1.0))


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    api_key, lat, lon, lang = load_config(args.lat, args.lon)

    try:
        service = build_weather_service(api_key, lang, args)
        if args.refresh > 0:
            signal.signal(signal.SIGINT, signal_handler)
            signal.signal(signal.SIGTERM, signal_handler)
            try:
                forecast_loop(service, lat, lon, args)
            except KeyboardInterrupt:
                logging.info("Stopping refresh loop")
            return

        forecast = service.get_forecast(lat, lon)
    except ConfigurationError as err:
        logging.error("Configuration error: %s", err)
        raise SystemExit(f"Configuration error: {err}")
    except WeatherProviderError as err:
        logging.error("Weather fetch failed: %s", err)
        raise SystemExit(f"Weather fetch failed: {err}")

    print(render(forecast, args))


if __name__ == "__main__":
    main()

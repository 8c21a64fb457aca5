import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz
import requests

from paperpress.config import settings, PRINTER_WIDTH
from paperpress.errors import LocationNotFound, UpstreamUnavailable
from paperpress.layout import Block
from paperpress.modules.forecast import ForecastData, compose_forecast

logger = logging.getLogger(__name__)

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

DAILY_FIELDS = [
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "apparent_temperature_max",
    "apparent_temperature_min",
    "precipitation_probability_max",
    "sunrise",
    "sunset",
    "uv_index_max",
    "wind_speed_10m_max",
    "wind_gusts_10m_max",
]


@dataclass(frozen=True)
class Location:
    name: str
    latitude: float
    longitude: float


def _get_json(url: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
    """GETs a JSON object; any transport or decoding failure is upstream's."""
    try:
        resp = requests.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Request to {url} failed: {e!r}")
        raise UpstreamUnavailable(f"Weather service unavailable: {e}") from e

    if not isinstance(data, dict):
        logger.error(f"Unexpected response from {url}: {data!r}")
        raise UpstreamUnavailable("Weather service returned an unexpected response")
    return data


def _format_location_name(result: Dict[str, Any]) -> str:
    """Format location name for display."""
    name = (result.get("name") or "").strip()
    admin1 = (result.get("admin1") or "").strip()  # State/Province
    country = (result.get("country") or "").strip()

    # For US, show state; for others, show country
    if result.get("country_code") == "US" and admin1:
        return f"{name}, {admin1}"
    elif country:
        return f"{name}, {country}"
    return name


def geocode(name: str, timeout: Optional[float] = None) -> Location:
    """Resolves a free-text place name to its best match."""
    data = _get_json(
        GEOCODING_URL,
        {"name": name, "count": 1, "language": "en", "format": "json"},
        timeout or settings.weather_timeout,
    )

    results = data.get("results")
    if not results:
        logger.info(f"No location matches '{name}'")
        raise LocationNotFound(f"No location matches '{name}'")

    try:
        top = results[0]
        return Location(
            name=_format_location_name(top),
            latitude=float(top["latitude"]),
            longitude=float(top["longitude"]),
        )
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.error(f"Malformed geocoding result for '{name}': {e!r}")
        raise UpstreamUnavailable("Geocoding service returned a malformed result") from e


def _first(daily: Dict[str, List[Any]], key: str) -> Optional[Any]:
    values = daily.get(key) or []
    return values[0] if values else None


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def fetch_forecast(location: Location, timeout: Optional[float] = None) -> ForecastData:
    """Fetches today's forecast in Fahrenheit and mph from Open-Meteo."""
    data = _get_json(
        FORECAST_URL,
        {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "daily": ",".join(DAILY_FIELDS),
            "hourly": "temperature_2m",
            "timezone": "auto",
            "forecast_days": 1,
            "temperature_unit": "fahrenheit",
            "wind_speed_unit": "mph",
        },
        timeout or settings.weather_timeout,
    )

    try:
        daily = data["daily"]
        hourly = (data.get("hourly") or {}).get("temperature_2m") or []
        return ForecastData(
            location=location.name,
            date=daily["time"][0],
            temperature_max=float(daily["temperature_2m_max"][0]),
            temperature_min=float(daily["temperature_2m_min"][0]),
            weather_code=_first(daily, "weather_code"),
            sunrise=daily["sunrise"][0],
            sunset=daily["sunset"][0],
            apparent_max=_optional_float(_first(daily, "apparent_temperature_max")),
            apparent_min=_optional_float(_first(daily, "apparent_temperature_min")),
            precipitation_probability=_optional_float(
                _first(daily, "precipitation_probability_max")
            ),
            uv_index=_optional_float(_first(daily, "uv_index_max")),
            wind_speed=_optional_float(_first(daily, "wind_speed_10m_max")),
            wind_gusts=_optional_float(_first(daily, "wind_gusts_10m_max")),
            hourly_temperatures=tuple(_optional_float(t) for t in hourly),
        )
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.error(f"Malformed forecast for {location.name}: {e!r}")
        raise UpstreamUnavailable("Weather service returned a malformed forecast") from e


def format_weather_receipt(
    location_name: Optional[str] = None, width: int = PRINTER_WIDTH
) -> List[Block]:
    """Looks up a place, fetches its forecast and composes the receipt."""
    location = geocode(location_name or settings.default_location)
    forecast = fetch_forecast(location)
    printed_at = datetime.now(pytz.timezone(settings.timezone))
    return compose_forecast(forecast, width=width, printed_at=printed_at)

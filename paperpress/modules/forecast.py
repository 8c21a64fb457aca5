"""
Forecast receipt composition.

Everything here is pure: the derived fields (moon phase, day/night strip,
hourly table) and the assembled document depend only on their arguments.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from paperpress.config import PRINTER_WIDTH
from paperpress.layout import Block, CENTER, RAW

SYNODIC_MONTH = 29.53  # days

SUNRISE_GLYPH = "^"
SUNSET_GLYPH = "v"
DAY_GLYPH = "="
NIGHT_GLYPH = "."

HOURLY_SAMPLE_HOURS = range(0, 24, 3)

# WMO weather interpretation codes, as returned by Open-Meteo
# See https://open-meteo.com/en/docs
WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


@dataclass(frozen=True)
class ForecastData:
    """One location's forecast for the current day, imperial units."""

    location: str
    date: str  # YYYY-MM-DD
    temperature_max: float
    temperature_min: float
    weather_code: Optional[int]  # WMO code; None when the service omits it
    sunrise: str  # ISO 8601 local time, e.g. 2024-06-01T05:25
    sunset: str
    apparent_max: Optional[float] = None
    apparent_min: Optional[float] = None
    precipitation_probability: Optional[float] = None
    uv_index: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_gusts: Optional[float] = None
    hourly_temperatures: Sequence[Optional[float]] = ()


@dataclass(frozen=True)
class MoonPhase:
    symbol: str
    name: str


UNKNOWN_PHASE = MoonPhase("?", "Unknown")

# (last whole day of the phase, phase)
MOON_PHASES = [
    (1, MoonPhase("o", "New Moon")),
    (6, MoonPhase(")", "Waxing Crescent")),
    (8, MoonPhase("D", "First Quarter")),
    (13, MoonPhase("0", "Waxing Gibbous")),
    (16, MoonPhase("O", "Full Moon")),
    (21, MoonPhase("0", "Waning Gibbous")),
    (23, MoonPhase("C", "Last Quarter")),
    (29, MoonPhase("(", "Waning Crescent")),
]


def describe_weather_code(code) -> str:
    """Maps a WMO weather code to text; anything unmapped is "Unknown"."""
    try:
        return WEATHER_CODES.get(int(code), "Unknown")
    except (TypeError, ValueError):
        return "Unknown"


def extract_time(timestamp: str) -> str:
    """Returns the HH:MM part of an ISO timestamp, or the input unchanged."""
    if "T" in timestamp:
        return timestamp.split("T", 1)[1]
    return timestamp


def hour_fraction(hhmm: str) -> float:
    """
    Parses "HH:MM" into hours, e.g. "06:30" -> 6.5.

    Only used for display, so a bad hour reads as noon and bad minutes as
    zero rather than failing the receipt.
    """
    parts = hhmm.split(":")
    try:
        hour = int(parts[0])
    except ValueError:
        hour = 12
    try:
        minute = int(parts[1]) if len(parts) > 1 else 0
    except ValueError:
        minute = 0
    return hour + minute / 60


def julian_day_number(year: int, month: int, day: int) -> int:
    """Julian Day Number of a Gregorian calendar date."""
    a = (14 - month) // 12
    y = year + 4800 - a
    m = month + 12 * a - 3
    return day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


# A known new moon: 6 January 2000
REFERENCE_NEW_MOON = julian_day_number(2000, 1, 6)


def moon_phase(date: str) -> MoonPhase:
    """Moon phase for a "YYYY-MM-DD" date, by days since a known new moon."""
    components = []
    for part in date.split("T")[0].split("-"):
        try:
            components.append(int(part))
        except ValueError:
            continue
    if len(components) < 3:
        return UNKNOWN_PHASE

    year, month, day = components[:3]
    age = (julian_day_number(year, month, day) - REFERENCE_NEW_MOON) % SYNODIC_MONTH
    age_days = int(age)

    for last_day, phase in MOON_PHASES:
        if age_days <= last_day:
            return phase
    return UNKNOWN_PHASE


def hour_to_column(hour: float, width: int = PRINTER_WIDTH) -> int:
    """Column of the day strip holding the given hour, clamped to the strip."""
    return min(max(int(hour * width / 24), 0), width - 1)


def column_to_hour(column: int, width: int = PRINTER_WIDTH) -> float:
    return column * 24 / width


def daylight_strip(sunrise: float, sunset: float, width: int = PRINTER_WIDTH) -> str:
    """
    One-line picture of the day, midnight to midnight.

    Sunrise and sunset get their own markers; the columns between them are
    daytime and everything else is night.
    """
    sunrise_col = hour_to_column(sunrise, width)
    sunset_col = hour_to_column(sunset, width)

    strip = []
    for col in range(width):
        if col == sunrise_col:
            strip.append(SUNRISE_GLYPH)
        elif col == sunset_col:
            strip.append(SUNSET_GLYPH)
        elif sunrise_col < col < sunset_col:
            strip.append(DAY_GLYPH)
        else:
            strip.append(NIGHT_GLYPH)
    return "".join(strip)


def hour_ruler(width: int = PRINTER_WIDTH) -> str:
    """Hour labels lined up under the daylight strip."""
    ruler = [" "] * width
    for hour in (0, 6, 12, 18):
        col = hour_to_column(hour, width)
        label = f"{hour:02d}"
        for offset, char in enumerate(label):
            if col + offset < width:
                ruler[col + offset] = char
    return "".join(ruler).rstrip()


def _hour_label(hour: int) -> str:
    suffix = "a" if hour < 12 else "p"
    return f"{hour % 12 or 12}{suffix}"


def hourly_table(
    temperatures: Sequence[Optional[float]], width: int = PRINTER_WIDTH
) -> List[str]:
    """
    Every third hour's temperature as two right-aligned rows.

    Hours the series does not reach (or holds no value for) are left out
    of both rows.
    """
    field = width // len(HOURLY_SAMPLE_HOURS)
    labels = []
    values = []
    for hour in HOURLY_SAMPLE_HOURS:
        if hour >= len(temperatures) or temperatures[hour] is None:
            continue
        labels.append(f"{_hour_label(hour):>{field}}")
        values.append(f"{round(temperatures[hour])}F".rjust(field))

    if not labels:
        return []
    return ["".join(labels), "".join(values)]


def _temp(value: Optional[float]) -> str:
    return "--" if value is None else f"{round(value)}F"


def _number(value: Optional[float], unit: str = "") -> str:
    if value is None:
        return "--"
    return f"{value:g}{unit}"


def _format_date(date: str) -> str:
    try:
        return datetime.strptime(date, "%Y-%m-%d").strftime("%A, %b %d %Y")
    except ValueError:
        return date


def compose_forecast(
    forecast: ForecastData,
    width: int = PRINTER_WIDTH,
    printed_at: Optional[datetime] = None,
) -> List[Block]:
    """Assembles the weather receipt in its fixed section order."""
    rule = Block("-" * width)

    blocks = [
        Block("WEATHER", CENTER),
        Block(forecast.location.upper()[:width], CENTER),
        Block(_format_date(forecast.date)[:width], CENTER),
        rule,
        Block(f"Conditions: {describe_weather_code(forecast.weather_code)}"),
        Block(
            f"High: {_temp(forecast.temperature_max)} "
            f"Low: {_temp(forecast.temperature_min)}\n"
            f"Feels like: {_temp(forecast.apparent_max)} / "
            f"{_temp(forecast.apparent_min)}"
        ),
        Block(
            f"Precipitation: {_number(forecast.precipitation_probability, '%')}\n"
            f"UV index: {_number(forecast.uv_index)}\n"
            f"Wind: {_number(forecast.wind_speed, ' mph')}, "
            f"gusts {_number(forecast.wind_gusts, ' mph')}"
        ),
        rule,
    ]

    table = hourly_table(forecast.hourly_temperatures, width)
    if table:
        blocks.extend([Block("\n".join(table), RAW), rule])

    sunrise = extract_time(forecast.sunrise)
    sunset = extract_time(forecast.sunset)
    half = width // 2
    blocks.extend(
        [
            Block(
                "\n".join(
                    [
                        daylight_strip(hour_fraction(sunrise), hour_fraction(sunset), width),
                        hour_ruler(width),
                        f"Sunrise {sunrise}".ljust(half) + f"Sunset {sunset}".rjust(width - half),
                    ]
                ),
                RAW,
            ),
            rule,
        ]
    )

    phase = moon_phase(forecast.date)
    blocks.append(Block(f"Moon: {phase.symbol} {phase.name}"))

    if printed_at is not None:
        blocks.append(Block(f"Printed {printed_at.strftime('%a %b %d %I:%M %p')}"))

    return blocks

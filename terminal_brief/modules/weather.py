"""
Weather module for terminal-brief.
Shows current conditions from Open-Meteo for the configured city.

Setup geocodes the city once; display fetches the current conditions for the
resulting coordinates. Both results are cached.
"""

import math
from typing import Any, Dict, Optional, Tuple

from terminal_brief.core.color import color_bold_text, color_text
from terminal_brief.core.config import BriefConfig
from terminal_brief.core.errors import ApiError
from .base import BriefModule

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

DEFAULT_CITY = "New York"
DEFAULT_COUNTRY = "US"

CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,is_day,"
    "precipitation,weather_code,wind_speed_10m"
)

# WMO weather code -> (description, day emoji, night emoji)
WEATHER_CODES: Dict[int, Tuple[str, str, str]] = {
    0: ("Clear sky", "☀️", "🌙"),
    1: ("Mainly clear", "🌤️", "🌙"),
    2: ("Partly cloudy", "⛅", "☁️"),
    3: ("Overcast", "☁️", "☁️"),
    45: ("Foggy", "🌫️", "🌫️"),
    48: ("Foggy", "🌫️", "🌫️"),
    51: ("Light drizzle", "🌦️", "🌦️"),
    53: ("Moderate drizzle", "🌦️", "🌦️"),
    55: ("Dense drizzle", "🌦️", "🌦️"),
    56: ("Freezing drizzle", "🌨️", "🌨️"),
    57: ("Freezing drizzle", "🌨️", "🌨️"),
    61: ("Slight rain", "🌧️", "🌧️"),
    63: ("Moderate rain", "🌧️", "🌧️"),
    65: ("Heavy rain", "🌧️", "🌧️"),
    66: ("Freezing rain", "🌨️", "🌨️"),
    67: ("Freezing rain", "🌨️", "🌨️"),
    71: ("Slight snow", "❄️", "❄️"),
    73: ("Moderate snow", "❄️", "❄️"),
    75: ("Heavy snow", "❄️", "❄️"),
    77: ("Snow grains", "❄️", "❄️"),
    80: ("Light rain showers", "🌧️", "🌧️"),
    81: ("Moderate rain showers", "🌧️", "🌧️"),
    82: ("Violent rain showers", "🌧️", "🌧️"),
    85: ("Snow showers", "🌨️", "🌨️"),
    86: ("Snow showers", "🌨️", "🌨️"),
    95: ("Thunderstorm", "⛈️", "⛈️"),
    96: ("Thunderstorm with hail", "⛈️", "⛈️"),
    99: ("Thunderstorm with hail", "⛈️", "⛈️"),
}
UNKNOWN_WEATHER = ("Unknown", "🌡️", "🌡️")


def temperature_unit(units: str) -> str:
    """Map configured units to Open-Meteo's temperature unit."""
    return "fahrenheit" if units == "imperial" else "celsius"


def temperature_color(temp: float, unit: str) -> str:
    """Pick a color for a temperature, using Fahrenheit thresholds."""
    fahrenheit = temp * 9 / 5 + 32 if unit == "celsius" else temp
    if fahrenheit < 32:
        return "cyan"
    elif fahrenheit < 50:
        return "blue"
    elif fahrenheit < 70:
        return "green"
    elif fahrenheit < 85:
        return "yellow"
    elif fahrenheit < 95:
        return "magenta"
    return "red"


def describe_weather(code: int, is_day: bool) -> Tuple[str, str]:
    """Get (description, emoji) for a WMO weather code."""
    description, day_emoji, night_emoji = WEATHER_CODES.get(code, UNKNOWN_WEATHER)
    return description, day_emoji if is_day else night_emoji


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class WeatherModule(BriefModule):
    """Current weather for one location."""

    name = "weather"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.latitude: Optional[float] = None
        self.longitude: Optional[float] = None
        self.location_name: Optional[str] = None
        self.country: Optional[str] = None

    async def _geocode(self, city: str, country: Optional[str]) -> Optional[Dict[str, Any]]:
        """Resolve a city to its first Open-Meteo geocoding match."""
        params = {"name": city, "count": 1, "language": "en", "format": "json"}
        if country and len(country) == 2:
            params["countryCode"] = country.upper()
        data = await self.http.get_json(GEOCODING_URL, params=params)
        results = data.get("results") or []
        if not results:
            return None
        first = results[0]
        return {
            "latitude": first["latitude"],
            "longitude": first["longitude"],
            "name": first.get("name", city),
            "country": first.get("country", country),
        }

    async def _fetch_current(self, unit: str) -> Dict[str, Any]:
        params = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "current": CURRENT_FIELDS,
            "timezone": "auto",
            "temperature_unit": unit,
            "wind_speed_unit": "mph" if unit == "fahrenheit" else "kmh",
        }
        data = await self.http.get_json(FORECAST_URL, params=params)
        return data["current"]

    async def setup(self, config: BriefConfig) -> None:
        city = config.weather.city
        country = config.weather.country
        if not city:
            self.logger.warning("No weather city set in configuration, defaulting to %s",
                                DEFAULT_CITY)
            city, country = DEFAULT_CITY, DEFAULT_COUNTRY

        self.location_name = city
        self.country = country
        self.latitude = self.longitude = None

        key = f"weather_geo_{city}_{country or ''}".lower().replace(" ", "_")
        try:
            location = await self.cache.request_with_cache(
                key,
                config.cache.location_duration,
                lambda: self._geocode(city, country),
            )
        except (ApiError, KeyError, TypeError, AttributeError) as e:
            self.logger.warning("Could not geocode city %s: %s", city, e)
            return

        if not location:
            self.logger.warning("Could not geocode city: %s", city)
            return

        self.latitude = location["latitude"]
        self.longitude = location["longitude"]
        self.location_name = location["name"]
        self.country = location["country"]

    async def display(self, config: BriefConfig) -> str:
        if self.latitude is None or self.longitude is None:
            return self.failure(config, "Weather", "Could not find location")

        unit = temperature_unit(config.weather.units)
        key = f"weather_{self.latitude}_{self.longitude}_{unit}"
        try:
            current = await self.cache.request_with_cache(
                key,
                config.cache.weather_duration,
                lambda: self._fetch_current(unit),
            )
            temp = float(current["temperature_2m"])
            code = int(current["weather_code"])
            is_day = bool(current.get("is_day", 1))
        except (ApiError, KeyError, TypeError, ValueError) as e:
            self.logger.warning("Failed to fetch weather: %s", e)
            return self.failure(config, "Weather", "Failed to retrieve weather data")

        description, emoji = describe_weather(code, is_day)
        use_emojis = config.display.use_emojis
        symbol = "°F" if unit == "fahrenheit" else "°C"
        temp_display = color_bold_text(temperature_color(temp, unit),
                                       f"{round_half_up(temp)}{symbol}")

        message = self.header(config, "Weather:")
        if use_emojis:
            message += f" {emoji}"
        message += f" {temp_display} in {color_text('white', self.location_name)}"
        message += f" - {color_text('white', description)}"

        humidity = current.get("relative_humidity_2m")
        if config.weather.show_humidity and isinstance(humidity, (int, float)):
            drop = "💧 " if use_emojis else "humidity "
            message += f" | {color_text('blue', f'{drop}{round_half_up(humidity)}%')}"

        wind = current.get("wind_speed_10m")
        if config.weather.show_wind and isinstance(wind, (int, float)):
            wind_unit = "mph" if unit == "fahrenheit" else "km/h"
            gust = "💨 " if use_emojis else "wind "
            message += f" | {color_text('white', f'{gust}{round_half_up(wind)} {wind_unit}')}"

        return message + "\n"

"""Weather lookup via wttr.in (JSON format j1)"""

from urllib.parse import quote

import aiohttp

from agent_core.config import CONFIG
from agent_core.logger import tool_logger
from agent_core.models import ToolResult, ToolContext

MAX_FORECAST_DAYS = 3
MIDDAY_SLOT = 4  # hourly[] has 8 three-hour samples, index 4 is 12:00


class WeatherError(Exception):
    pass


def _value(items) -> str:
    """wttr.in wraps names as [{"value": "..."}]"""
    if items and isinstance(items, list) and isinstance(items[0], dict):
        return str(items[0].get("value", "")).strip()
    return ""


def clamp_days(days, available: int) -> int:
    try:
        days = int(days)
    except (TypeError, ValueError):
        days = 1
    return max(0, min(max(days, 1), MAX_FORECAST_DAYS, available))


def format_current(data: dict) -> str:
    current = data["current_condition"][0]
    area = (data.get("nearest_area") or [{}])[0]
    place = ", ".join(p for p in (
        _value(area.get("areaName")),
        _value(area.get("region")),
        _value(area.get("country")),
    ) if p)

    lines = [
        f"📍 {place}" if place else "📍 Unknown location",
        f"Condition: {_value(current.get('weatherDesc')) or 'n/a'}",
        f"🌡 Temperature: {current.get('temp_C')}°C / {current.get('temp_F')}°F",
        f"Feels like: {current.get('FeelsLikeC')}°C / {current.get('FeelsLikeF')}°F",
        f"💧 Humidity: {current.get('humidity')}%",
        f"💨 Wind: {current.get('windspeedKmph')} km/h {current.get('winddir16Point', '')}".rstrip(),
        f"Pressure: {current.get('pressure')} hPa",
        f"Visibility: {current.get('visibility')} km",
        f"☁️ Cloud cover: {current.get('cloudcover')}%",
        f"UV index: {current.get('uvIndex')}",
    ]
    return "\n".join(lines)


def format_forecast(data: dict, days: int) -> list[str]:
    """One text block per day, never more than the data source returned"""
    weather = data.get("weather") or []
    blocks = []
    for day in weather[:clamp_days(days, len(weather))]:
        hourly = day.get("hourly") or [{}]
        midday = hourly[MIDDAY_SLOT] if len(hourly) > MIDDAY_SLOT else hourly[-1]
        blocks.append("\n".join([
            f"📅 {day.get('date', '?')}",
            f"  High: {day.get('maxtempC')}°C / {day.get('maxtempF')}°F, "
            f"Low: {day.get('mintempC')}°C / {day.get('mintempF')}°F",
            f"  Midday: {_value(midday.get('weatherDesc')) or 'n/a'}",
            f"  Chance of rain: {midday.get('chanceofrain', '0')}%",
            f"  UV index: {day.get('uvIndex', midday.get('uvIndex', 'n/a'))}",
        ]))
    return blocks


def format_weather(data: dict, location: str, days: int = 1) -> str:
    if not data.get("current_condition"):
        raise WeatherError(f"No weather data for {location}")
    parts = [format_current(data)]
    forecast = format_forecast(data, days)
    if forecast:
        parts.append(f"Forecast ({len(forecast)} day{'s' if len(forecast) != 1 else ''}):")
        parts.extend(forecast)
    return "\n\n".join(parts)


async def fetch_weather(location: str, base_url: str = None) -> dict:
    """Single GET, no retries"""
    url = f"{base_url or CONFIG.weather_url}/{quote(location, safe='')}"
    async with aiohttp.ClientSession() as session:
        async with session.get(
            url,
            params={"format": "j1"},
            headers={"Accept": "application/json"},
            timeout=aiohttp.ClientTimeout(total=10)
        ) as resp:
            if resp.status != 200:
                raise WeatherError(f"Weather service returned HTTP {resp.status}")
            data = await resp.json(content_type=None)
    if not isinstance(data, dict):
        raise WeatherError("Unexpected response from weather service")
    return data


async def tool_get_weather(args: dict, ctx: ToolContext) -> ToolResult:
    """Current conditions plus a 1-3 day forecast"""
    location = str(args.get("location") or "").strip()
    if not location:
        return ToolResult(False, error="Location is required")

    days = args.get("days", 1)
    tool_logger.info(f"Weather for {location!r}, days={days}")

    try:
        data = await fetch_weather(location)
        return ToolResult(True, output=format_weather(data, location, days))
    except WeatherError as e:
        return ToolResult(False, error=str(e))
    except Exception as e:
        tool_logger.error(f"Weather error: {e}")
        return ToolResult(False, error=f"Failed to fetch weather: {e}")

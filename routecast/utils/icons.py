"""Mapping of provider weather codes to icon categories."""

from typing import Optional

from routecast.config import WEATHER_ICON_CODES
from routecast.models.weather import IconCategory


def icon_for_code(code: Optional[str]) -> IconCategory:
    """Map an OpenWeather icon code (e.g. ``"10d"``) to a category.

    Unknown or missing codes map to ``cloud``.
    """
    category = WEATHER_ICON_CODES.get((code or "").strip().lower())
    return IconCategory(category) if category else IconCategory.CLOUD


def icon_for_condition_id(condition_id: Optional[int]) -> IconCategory:
    """Map an OpenWeather condition id (e.g. ``502``) to a category.

    Used when a payload carries the numeric condition but no icon code.
    See https://openweathermap.org/weather-conditions for the ranges.
    """
    if condition_id is None:
        return IconCategory.CLOUD

    if 200 <= condition_id < 300:
        return IconCategory.CLOUD_LIGHTNING
    elif 300 <= condition_id < 400:
        return IconCategory.CLOUD_DRIZZLE
    elif 500 <= condition_id < 600:
        # Light and moderate rain read as drizzle
        return IconCategory.CLOUD_RAIN if condition_id >= 502 else IconCategory.CLOUD_DRIZZLE
    elif 600 <= condition_id < 700:
        return IconCategory.CLOUD_SNOW
    elif 700 <= condition_id < 800:
        return IconCategory.CLOUD_FOG
    elif condition_id == 800:
        return IconCategory.SUN
    elif condition_id == 801:
        return IconCategory.CLOUD_SUN

    return IconCategory.CLOUD

"""Weather domain models.

Readings are produced either by the live provider or by the synthetic
generator; a risk assessment is always attached before a reading leaves the
weather service.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from routecast.models.geo import Coordinate


class IconCategory(str, Enum):
    """Coarse visual bucket for a weather condition."""

    SUN = "sun"
    MOON = "moon"
    CLOUD = "cloud"
    CLOUD_SUN = "cloud-sun"
    CLOUD_MOON = "cloud-moon"
    CLOUD_RAIN = "cloud-rain"
    CLOUD_LIGHTNING = "cloud-lightning"
    CLOUD_SNOW = "cloud-snow"
    CLOUD_FOG = "cloud-fog"
    CLOUD_DRIZZLE = "cloud-drizzle"


class RiskReason(str, Enum):
    """Why a reading is considered risky for travel."""

    SNOW = "Snow"
    ICE = "Ice risk"
    FOG = "Fog risk"
    HIGH_WINDS = "High winds"
    HEAVY_RAIN = "Heavy rain"
    THUNDERSTORM = "Thunderstorm"


SOURCE_CURRENT = "openweather:current"
SOURCE_FORECAST = "openweather:forecast"
SOURCE_SYNTHETIC = "synthetic"


@dataclass(frozen=True)
class WeatherReading:
    """Normalized weather at a place and time.

    Units:
    - temperature in whole degrees Celsius
    - humidity in percent (0-100)
    - wind speed in whole km/h
    """

    coordinates: Coordinate
    time: datetime
    temperature: int
    condition: str
    icon: IconCategory
    humidity: int
    wind_speed: int
    source: str = SOURCE_SYNTHETIC


@dataclass(frozen=True)
class RiskAssessment:
    is_risky: bool
    risk_reason: Optional[RiskReason] = None


@dataclass(frozen=True)
class WeatherDataPoint:
    """A reading together with its risk assessment."""

    reading: WeatherReading
    risk: RiskAssessment

    @property
    def temperature(self) -> int:
        return self.reading.temperature

    @property
    def condition(self) -> str:
        return self.reading.condition

    @property
    def icon(self) -> IconCategory:
        return self.reading.icon

    @property
    def humidity(self) -> int:
        return self.reading.humidity

    @property
    def wind_speed(self) -> int:
        return self.reading.wind_speed

    @property
    def is_risky(self) -> bool:
        return self.risk.is_risky

    @property
    def risk_reason(self) -> Optional[RiskReason]:
        return self.risk.risk_reason

    @property
    def is_synthetic(self) -> bool:
        return self.reading.source == SOURCE_SYNTHETIC

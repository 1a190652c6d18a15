"""Weather response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from routecast.models.weather import RiskAssessment, WeatherDataPoint


class RiskAssessmentResponse(BaseModel):
    """Travel risk derived from a weather reading."""

    is_risky: bool
    risk_reason: Optional[str] = Field(
        None,
        description="One of: Snow, Ice risk, Fog risk, High winds, Heavy rain, Thunderstorm",
    )

    @classmethod
    def from_domain(cls, risk: RiskAssessment) -> "RiskAssessmentResponse":
        return cls(
            is_risky=risk.is_risky,
            risk_reason=risk.risk_reason.value if risk.risk_reason else None,
        )


class WeatherDataPointResponse(BaseModel):
    """Weather at a point in space and time, with risk assessment."""

    lat: float
    lng: float
    time: datetime
    temperature: int = Field(..., description="Degrees Celsius")
    condition: str
    icon: str = Field(..., description="Icon category, e.g. 'cloud-rain'")
    humidity: int = Field(..., ge=0, le=100, description="Relative humidity in percent")
    wind_speed: int = Field(..., ge=0, description="Wind speed in km/h")
    source: str = Field(..., description="openweather:current, openweather:forecast or synthetic")
    is_risky: bool
    risk_reason: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "lat": 51.5072,
                "lng": -0.1276,
                "time": "2025-01-15T08:00:00Z",
                "temperature": -2,
                "condition": "Light snow",
                "icon": "cloud-snow",
                "humidity": 88,
                "wind_speed": 14,
                "source": "openweather:forecast",
                "is_risky": True,
                "risk_reason": "Snow",
            }
        }

    @classmethod
    def from_domain(cls, data_point: WeatherDataPoint) -> "WeatherDataPointResponse":
        reading = data_point.reading
        return cls(
            lat=reading.coordinates.lat,
            lng=reading.coordinates.lng,
            time=reading.time,
            temperature=reading.temperature,
            condition=reading.condition,
            icon=reading.icon.value,
            humidity=reading.humidity,
            wind_speed=reading.wind_speed,
            source=reading.source,
            is_risky=data_point.is_risky,
            risk_reason=data_point.risk_reason.value if data_point.risk_reason else None,
        )

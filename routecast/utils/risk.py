"""Travel risk classification for weather readings.

Rules are evaluated in a fixed order and the first match wins. Conditions are
not mutually exclusive (a freezing snowy reading is also an icy one), so the
order decides which reason the traveller sees.
"""

from routecast.models.weather import RiskAssessment, RiskReason

FREEZING_C = 0
FOG_HUMIDITY_PCT = 90
HIGH_WIND_KMH = 30
HEAVY_RAIN_HUMIDITY_PCT = 80


def assess_risk(
    temperature: float,
    condition: str,
    wind_speed: float,
    humidity: float,
) -> RiskAssessment:
    """Classify a reading as risky or not.

    Args:
        temperature: Temperature in Celsius
        condition: Free-text condition description (matched case-insensitively)
        wind_speed: Wind speed in km/h
        humidity: Relative humidity in percent

    Returns:
        RiskAssessment with the first matching reason, or not risky
    """
    text = (condition or "").lower()

    if temperature < FREEZING_C and "snow" in text:
        return RiskAssessment(is_risky=True, risk_reason=RiskReason.SNOW)
    elif temperature < FREEZING_C:
        return RiskAssessment(is_risky=True, risk_reason=RiskReason.ICE)
    elif "fog" in text and humidity > FOG_HUMIDITY_PCT:
        return RiskAssessment(is_risky=True, risk_reason=RiskReason.FOG)
    elif wind_speed > HIGH_WIND_KMH:
        return RiskAssessment(is_risky=True, risk_reason=RiskReason.HIGH_WINDS)
    elif "rain" in text and humidity > HEAVY_RAIN_HUMIDITY_PCT:
        return RiskAssessment(is_risky=True, risk_reason=RiskReason.HEAVY_RAIN)
    elif "thunderstorm" in text:
        return RiskAssessment(is_risky=True, risk_reason=RiskReason.THUNDERSTORM)

    return RiskAssessment(is_risky=False)

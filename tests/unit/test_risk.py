"""Unit tests for travel risk classification."""

import pytest

from routecast.models.weather import RiskReason
from routecast.utils.risk import assess_risk


@pytest.mark.parametrize(
    "temperature,condition,wind_speed,humidity,expected",
    [
        (-5, "Snow", 10, 80, RiskReason.SNOW),
        (-1, "Light snow", 40, 95, RiskReason.SNOW),
        (-1, "Clear", 5, 50, RiskReason.ICE),
        (-1, "Fog", 40, 95, RiskReason.ICE),
        (5, "Fog", 40, 95, RiskReason.FOG),
        (5, "Fog", 10, 91, RiskReason.FOG),
        (5, "Clear", 35, 50, RiskReason.HIGH_WINDS),
        (5, "Rain", 31, 90, RiskReason.HIGH_WINDS),
        (5, "Rain", 10, 85, RiskReason.HEAVY_RAIN),
        (5, "Thunderstorm", 10, 60, RiskReason.THUNDERSTORM),
    ],
)
def test_assess_risk_precedence(temperature, condition, wind_speed, humidity, expected):
    """The first matching rule decides the reason."""
    result = assess_risk(temperature, condition, wind_speed, humidity)

    assert result.is_risky is True
    assert result.risk_reason == expected


def test_assess_risk_clear_day_not_risky():
    result = assess_risk(20, "Clear", 10, 50)

    assert result.is_risky is False
    assert result.risk_reason is None


def test_assess_risk_condition_match_is_case_insensitive():
    assert assess_risk(-2, "HEAVY SNOW", 0, 50).risk_reason == RiskReason.SNOW
    assert assess_risk(5, "fog", 0, 95).risk_reason == RiskReason.FOG


def test_assess_risk_thresholds_are_strict():
    """Values exactly on a threshold do not trigger."""
    assert assess_risk(0, "Clear", 10, 50).is_risky is False
    assert assess_risk(5, "Fog", 10, 90).is_risky is False
    assert assess_risk(5, "Clear", 30, 50).is_risky is False
    assert assess_risk(5, "Rain", 10, 80).is_risky is False


def test_assess_risk_light_rain_with_high_humidity():
    """Any condition containing "rain" counts, including light rain."""
    assert assess_risk(8, "Light Rain", 5, 81).risk_reason == RiskReason.HEAVY_RAIN


def test_assess_risk_snow_above_freezing_not_risky():
    assert assess_risk(1, "Snow", 5, 60).is_risky is False


def test_assess_risk_empty_condition():
    assert assess_risk(10, "", 5, 50).is_risky is False

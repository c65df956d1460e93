"""
Tests for CityReading model.

Tests cover:
- Construction from /cities payload rows
- Validation rules
- Immutability
"""

import pytest

from airquality.city_reading import CityReading


class TestCityReading:
    """Test suite for CityReading."""

    @pytest.fixture
    def payload(self):
        return {"city": "Delhi", "country": "IN", "aqi": 312, "pm25": 262.4, "pm10": 398.1}

    # ==================== Parsing ====================

    def test_from_dict(self, payload):
        reading = CityReading.from_dict(payload)
        assert reading == CityReading("Delhi", "IN", 312, 262.4, 398.1)

    def test_integral_aqi_is_int(self, payload):
        payload["aqi"] = 54.0
        assert isinstance(CityReading.from_dict(payload).aqi, int)

    def test_fractional_aqi_kept(self, payload):
        payload["aqi"] = 54.5
        assert CityReading.from_dict(payload).aqi == 54.5

    def test_missing_fields(self):
        reading = CityReading.from_dict({"city": "Lagos"})
        assert reading == CityReading("Lagos", "", None, None, None)

    def test_non_mapping_payload(self):
        assert CityReading.from_dict("oops") == CityReading("", "")

    def test_string_readings_are_coerced(self):
        reading = CityReading.from_dict({"city": "X", "aqi": "88", "pm25": "bad"})
        assert reading.aqi == 88
        assert reading.pm25 is None

    # ==================== Validation ====================

    def test_valid(self, payload):
        assert CityReading.from_dict(payload).validate() == (True, None)

    def test_missing_readings_are_valid(self):
        assert CityReading("Zürich", "CH").validate() == (True, None)

    @pytest.mark.parametrize("kwargs, message", [
        ({"city": ""}, "city must not be empty"),
        ({"aqi": -1}, "aqi must be >= 0"),
        ({"pm25": -0.1}, "pm25 must be >= 0"),
        ({"pm10": -3}, "pm10 must be >= 0"),
    ])
    def test_invalid(self, kwargs, message):
        values = {"city": "Paris", "country": "FR", "aqi": 10, "pm25": 1.0, "pm10": 2.0}
        values.update(kwargs)
        assert CityReading(**values).validate() == (False, message)

    # ==================== Immutability ====================

    def test_immutable(self, payload):
        reading = CityReading.from_dict(payload)
        with pytest.raises(AttributeError):
            reading.aqi = 1

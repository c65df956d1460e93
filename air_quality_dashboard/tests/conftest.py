"""
Pytest configuration for Air Quality Dashboard tests.

Provides shared row fixtures.
"""

import pytest

from airquality.city_reading import CityReading
from airquality.request_entry import RequestEntry


@pytest.fixture
def city_rows():
    """Fixture providing a small cities snapshot in API order."""
    return [
        CityReading("Paris", "France", 54, 13.1, 22.4),
        CityReading("berlin", "Germany", 31, 7.5, 14.0),
        CityReading("Paramaribo", "Suriname", 38, 9.0, 15.6),
        CityReading("Delhi", "India", 312, 262.4, 398.1),
        CityReading("Lyon", "France", None, None, None),
    ]


@pytest.fixture
def timeline_rows():
    """Fixture providing request timeline entries in API order."""
    return [
        RequestEntry("2026-10-19T08:00:02Z", "/api/cities", "GET", 200, 34),
        RequestEntry("2026-10-19T10:00:00+02:00", "/api/global", "GET", 200, 11),
        RequestEntry("2026-10-19T08:05:00Z", "/api/refresh", "POST", 500, 1503),
        RequestEntry("2026-10-19T07:59:00Z", "/api/ai/recommendations/x", "get", 404, 6),
    ]

"""
Data source module for the Air Quality Dashboard.

This module contains the DataSource class, the REST client that fetches the
JSON payloads both dashboards are built from. Supports two modes:
- "mock": Deterministic built-in sample payloads (offline, always available)
- "http": Real calls to the air quality tracker API via requests

Any transport or decoding failure is raised as UpstreamUnavailable; callers
keep their previous snapshot when that happens. There is no retry or backoff.
"""

import copy
import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from .classifier import Classifier
from .config import DashboardConfig
from .errors import CityNotFound, UpstreamUnavailable

logger = logging.getLogger(__name__)


MOCK_CITIES = [
    {"city": "Reykjavik", "country": "IS", "aqi": 18, "pm25": 4.2, "pm10": 9.8},
    {"city": "Paris", "country": "FR", "aqi": 54, "pm25": 13.1, "pm10": 22.4},
    {"city": "Paramaribo", "country": "SR", "aqi": 38, "pm25": 9.0, "pm10": 15.6},
    {"city": "Los Angeles", "country": "US", "aqi": 97, "pm25": 34.0, "pm10": 41.3},
    {"city": "Beijing", "country": "CN", "aqi": 158, "pm25": 68.9, "pm10": 112.0},
    {"city": "Delhi", "country": "IN", "aqi": 312, "pm25": 262.4, "pm10": 398.1},
    {"city": "Lagos", "country": "NG", "aqi": 121, "pm25": 44.7, "pm10": None},
    {"city": "Zürich", "country": "CH", "aqi": None, "pm25": None, "pm10": None},
]

MOCK_GLOBAL = {
    "totalCities": 7,
    "totalCountries": 7,
    "averageGlobalAqi": 114.0,
    "citiesWithGoodAir": 2,
    "citiesWithModerateAir": 2,
    "citiesWithUnhealthyAir": 3,
    "cleanestCity": "Reykjavik",
    "cleanestAqi": 18,
    "mostPollutedCity": "Delhi",
    "mostPollutedAqi": 312,
    "lastUpdated": "2026-10-19T08:00:00Z",
}

MOCK_SUMMARY = {
    "totalRequests": 42,
    "endpointStats": {"/api/cities": 20, "/api/global": 15, "/api/ai/recommendations": 7},
    "responseTimeStats": {"/api/cities": 35.456, "/api/global": 12.5, "/api/ai/recommendations": 820.0},
    "successErrorRates": {
        "/api/cities": {"success": 19, "error": 1},
        "/api/global": {"success": 15, "error": 0},
        "/api/ai/recommendations": {"success": 5, "error": 2},
    },
}

MOCK_TIMELINE = [
    {"timestamp": "2026-10-19T08:00:01Z", "endpoint": "/api/global", "method": "GET", "statusCode": 200, "responseTime": 11},
    {"timestamp": "2026-10-19T08:00:02Z", "endpoint": "/api/cities", "method": "GET", "statusCode": 200, "responseTime": 34},
    {"timestamp": "2026-10-19T08:03:10Z", "endpoint": "/api/ai/recommendations/Atlantis", "method": "GET", "statusCode": 404, "responseTime": 6},
    {"timestamp": "2026-10-19T08:05:00Z", "endpoint": "/api/refresh", "method": "POST", "statusCode": 500, "responseTime": 1503},
    {"timestamp": "2026-10-19T08:06:45Z", "endpoint": "/api/ai/recommendations/Delhi", "method": "GET", "statusCode": 200, "responseTime": 911},
]

# (upper AQI bound, assessment, cards); the last bound is open-ended
MOCK_ADVICE = (
    (50, "Air quality is good. Outdoor activities are safe for everyone.", [
        ("low", "🏃", "Outdoor Exercise", "A good day for running, cycling or sports outside."),
        ("low", "🪟", "Open Windows", "Ventilate your home with fresh air."),
    ]),
    (100, "Air quality is acceptable. Unusually sensitive people should take care.", [
        ("low", "⚠️", "Moderate Caution", "Outdoor activities are generally safe with normal precautions."),
        ("medium", "🫁", "Sensitive Groups", "People with respiratory issues should limit prolonged exertion."),
    ]),
    (150, "Sensitive groups may experience health effects.", [
        ("medium", "⏰", "Limit Outdoor Time", "Reduce prolonged outdoor exertion."),
        ("medium", "😷", "Wear a Mask", "Consider an N95 mask outdoors."),
    ]),
    (None, "Everyone may experience health effects. Stay indoors where possible.", [
        ("high", "🏠", "Stay Indoors", "Avoid outdoor activities and keep windows closed."),
        ("high", "🌬️", "Air Purification", "Run a HEPA air purifier on a high setting."),
    ]),
)


class DataSource:
    """
    Client for the air quality tracker REST API.

    Mode is taken from the DashboardConfig (AIRQUALITY_SOURCE_MODE) unless
    overridden. Every fetch returns the decoded JSON payload unchanged; turning
    it into rows is the caller's job.
    """

    def __init__(
        self,
        config: Optional[DashboardConfig] = None,
        mode: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the data source.

        Args:
            config: Settings; read from the environment if None
            mode: Optional mode override ("mock" or "http")
            session: Optional requests session (shared connection pool)
        """
        self.config = config or DashboardConfig.from_env()
        requested = (mode or self.config.source_mode).lower()
        self.mode = requested if requested in ("mock", "http") else "mock"
        self.base_url = self.config.api_base_url.rstrip("/")
        self.timeout = self.config.request_timeout
        self._session = session or requests.Session()
        self._classifier = Classifier()

    # ==================== Endpoints ====================

    def fetch_global_stats(self) -> dict:
        if self.mode == "mock":
            return dict(MOCK_GLOBAL)
        return self._get_json("/global")

    def fetch_cities(self) -> list:
        if self.mode == "mock":
            return [dict(city) for city in MOCK_CITIES]
        return self._get_list("/cities")

    def fetch_summary(self) -> dict:
        if self.mode == "mock":
            return copy.deepcopy(MOCK_SUMMARY)
        return self._get_json("/analytics/summary")

    def fetch_timeline(self) -> list:
        if self.mode == "mock":
            return [dict(entry) for entry in MOCK_TIMELINE]
        return self._get_list("/analytics/timeline")

    def fetch_ai_recommendation(self, city: str) -> dict:
        """
        Fetches health recommendations for one city.

        Args:
            city: City name as typed by the user

        Returns:
            The recommendation payload

        Raises:
            ValueError: If the city name is blank
            CityNotFound: If the backend does not know the city
            UpstreamUnavailable: On any other failure
        """
        city = (city or "").strip()
        if not city:
            raise ValueError("Please enter a city name to get AI recommendations.")
        path = f"/ai/recommendations/{quote(city, safe='')}"
        if self.mode == "mock":
            return self._mock_recommendation(city, path)
        return self._get_json(path, city=city)

    def trigger_refresh(self) -> None:
        """Asks the backend to re-pull upstream measurements (POST /refresh)."""
        if self.mode == "mock":
            logger.info("Mock refresh requested; nothing to do")
            return
        self._request("POST", "/refresh")

    # ==================== Transport ====================

    def _request(self, method: str, path: str, city: Optional[str] = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise UpstreamUnavailable(f"Request to {path} failed: {e}", endpoint=path) from e

        if response.status_code == 404 and city is not None:
            raise CityNotFound(city, endpoint=path)
        if not response.ok:
            logger.error("%s %s returned HTTP %d", method, path, response.status_code)
            raise UpstreamUnavailable(
                f"HTTP error! Status: {response.status_code}",
                endpoint=path,
                status_code=response.status_code,
            )
        return response

    def _get_json(self, path: str, city: Optional[str] = None) -> Any:
        response = self._request("GET", path, city=city)
        try:
            return response.json()
        except ValueError as e:
            logger.error("GET %s returned a body that is not JSON", path)
            raise UpstreamUnavailable(f"Invalid JSON from {path}", endpoint=path,
                                      status_code=response.status_code) from e

    def _get_list(self, path: str) -> list:
        payload = self._get_json(path)
        if not isinstance(payload, list):
            raise UpstreamUnavailable(f"Expected a JSON array from {path}", endpoint=path)
        return payload

    # ==================== Mock payloads ====================

    def _mock_recommendation(self, city: str, path: str) -> dict:
        match = next((row for row in MOCK_CITIES if row["city"].casefold() == city.casefold()), None)
        if match is None:
            raise CityNotFound(city, endpoint=path)

        aqi = match["aqi"] or 0
        assessment, cards = MOCK_ADVICE[-1][1], MOCK_ADVICE[-1][2]
        for upper_bound, band_assessment, band_cards in MOCK_ADVICE:
            if upper_bound is None or aqi <= upper_bound:
                assessment, cards = band_assessment, band_cards
                break

        return {
            "city": match["city"],
            "country": match["country"],
            "aqi": match["aqi"],
            "aqiCategory": self._classifier.classify_aqi(match["aqi"]).label,
            "overallAssessment": assessment,
            "recommendations": [
                {"severity": severity, "icon": icon, "title": title, "description": description}
                for severity, icon, title, description in cards
            ],
        }

"""
Global statistics module for the Air Quality Dashboard.

This module defines the GlobalStats dataclass, the snapshot behind the
dashboard's summary cards and AQI distribution chart. All values are computed
by the backend; the dashboard only reads them.
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .fields import coerce_number, coerce_text


def _count(value: Any) -> int:
    number = coerce_number(value)
    return int(number) if number is not None else 0


def _optional_int(value: Any) -> Optional[int]:
    number = coerce_number(value)
    return int(round(number)) if number is not None else None


@dataclass(frozen=True)
class GlobalStats:
    """
    Worldwide air quality summary as returned by GET /global.

    Attributes:
        total_cities: Number of cities with a reading
        total_countries: Number of distinct countries
        average_global_aqi: Mean AQI over all cities
        cities_with_good_air: Cities with AQI 0-50
        cities_with_moderate_air: Cities with AQI 51-100 (optional in the payload, 0 if absent)
        cities_with_unhealthy_air: Cities with AQI 101+
        cleanest_city: Name of the city with the lowest AQI, or None
        cleanest_aqi: Its AQI, or None
        most_polluted_city: Name of the city with the highest AQI, or None
        most_polluted_aqi: Its AQI, or None
        last_updated: Backend timestamp string, or None
    """

    total_cities: int = 0
    total_countries: int = 0
    average_global_aqi: float = 0.0
    cities_with_good_air: int = 0
    cities_with_moderate_air: int = 0
    cities_with_unhealthy_air: int = 0
    cleanest_city: Optional[str] = None
    cleanest_aqi: Optional[int] = None
    most_polluted_city: Optional[str] = None
    most_polluted_aqi: Optional[int] = None
    last_updated: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GlobalStats":
        """
        Builds the snapshot from the /global response.

        Missing counters become 0 and missing names/extremes become None.
        """
        if not isinstance(payload, Mapping):
            payload = {}
        average = coerce_number(payload.get("averageGlobalAqi"))
        return cls(
            total_cities=_count(payload.get("totalCities")),
            total_countries=_count(payload.get("totalCountries")),
            average_global_aqi=average if average is not None else 0.0,
            cities_with_good_air=_count(payload.get("citiesWithGoodAir")),
            cities_with_moderate_air=_count(payload.get("citiesWithModerateAir")),
            cities_with_unhealthy_air=_count(payload.get("citiesWithUnhealthyAir")),
            cleanest_city=coerce_text(payload.get("cleanestCity")) or None,
            cleanest_aqi=_optional_int(payload.get("cleanestAqi")),
            most_polluted_city=coerce_text(payload.get("mostPollutedCity")) or None,
            most_polluted_aqi=_optional_int(payload.get("mostPollutedAqi")),
            last_updated=coerce_text(payload.get("lastUpdated")) or None,
        )

    @property
    def rounded_average_aqi(self) -> int:
        """Average AQI rounded half-up for display."""
        return math.floor(self.average_global_aqi + 0.5)

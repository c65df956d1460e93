"""
City reading module for the Air Quality Dashboard.

This module defines the CityReading dataclass, one row of the cities table:
the latest AQI and particulate readings for a city. Rows are immutable once
received; a refresh replaces the whole row set.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .fields import coerce_number, coerce_text


@dataclass(frozen=True)
class CityReading:
    """
    Represents the latest air quality reading for one city.

    Attributes:
        city: City name
        country: Country name or code
        aqi: Air Quality Index, or None if the backend has no reading
        pm25: PM2.5 concentration in µg/m³, or None
        pm10: PM10 concentration in µg/m³, or None
    """

    city: str
    country: str
    aqi: Optional[float] = None
    pm25: Optional[float] = None
    pm10: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CityReading":
        """
        Builds a reading from one element of the /cities response.

        Missing or ill-typed fields become neutral defaults ("" for strings,
        None for readings) so one bad row never breaks the table.

        Args:
            payload: Decoded JSON object

        Returns:
            A CityReading
        """
        if not isinstance(payload, Mapping):
            payload = {}
        aqi = coerce_number(payload.get("aqi"))
        return cls(
            city=coerce_text(payload.get("city")),
            country=coerce_text(payload.get("country")),
            aqi=int(aqi) if aqi is not None and aqi.is_integer() else aqi,
            pm25=coerce_number(payload.get("pm25")),
            pm10=coerce_number(payload.get("pm10")),
        )

    def validate(self) -> tuple[bool, Optional[str]]:
        """
        Checks that the reading is usable for ranking.

        Returns:
            (True, None) if valid, otherwise (False, reason)
        """
        if not self.city:
            return (False, "city must not be empty")
        if self.aqi is not None and self.aqi < 0:
            return (False, "aqi must be >= 0")
        if self.pm25 is not None and self.pm25 < 0:
            return (False, "pm25 must be >= 0")
        if self.pm10 is not None and self.pm10 < 0:
            return (False, "pm10 must be >= 0")
        return (True, None)

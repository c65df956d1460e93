"""
Classifier module for the Air Quality Dashboard.

This module contains the Classifier class, a pure mapping from a single metric
(AQI reading, HTTP status code or HTTP method) to a discrete category, the CSS
style tag the view uses for it, and its display color. It holds no state and
never raises: missing or non-numeric metrics map to a neutral classification.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .fields import coerce_number


class MetricKind(Enum):
    """Kinds of metric the classifier understands."""

    AQI = "aqi"
    HTTP_STATUS = "http_status"
    HTTP_METHOD = "http_method"


@dataclass(frozen=True)
class Classification:
    """
    Result of classifying one metric value.

    Attributes:
        category: Category name (e.g. "Good", "VeryUnhealthy", "Success")
        style_tag: CSS class the view attaches to the value ("" for none)
        color: Hex display color
    """

    category: str
    style_tag: str
    color: str

    @property
    def label(self) -> str:
        """Human-readable category name, e.g. "Very Unhealthy"."""
        return CATEGORY_LABELS.get(self.category, self.category)


NEUTRAL_STYLE = ""
NEUTRAL_COLOR = "#94a3b8"

# Upper bounds are inclusive; anything above the last bound is hazardous
AQI_BANDS = (
    (50, Classification("Good", "good", "#22c55e")),
    (100, Classification("Moderate", "moderate", "#eab308")),
    (150, Classification("Sensitive", "sensitive", "#f97316")),
    (200, Classification("Unhealthy", "unhealthy", "#ef4444")),
    (300, Classification("VeryUnhealthy", "very-unhealthy", "#a855f7")),
)
AQI_HAZARDOUS = Classification("Hazardous", "hazardous", "#7f1d1d")
AQI_UNKNOWN = Classification("Unknown", NEUTRAL_STYLE, NEUTRAL_COLOR)

# Readings above this count as unhealthy in the global distribution chart
UNHEALTHY_AQI_THRESHOLD = 100

STATUS_SUCCESS = Classification("Success", "aqi-good", "#22c55e")
STATUS_CLIENT_ERROR = Classification("ClientError", "aqi-moderate", "#eab308")
STATUS_SERVER_ERROR = Classification("ServerError", "aqi-unhealthy", "#ef4444")
STATUS_OTHER = Classification("Other", NEUTRAL_STYLE, NEUTRAL_COLOR)

METHOD_STYLES = {
    "GET": Classification("GET", "good", "#22c55e"),
    "POST": Classification("POST", "moderate", "#eab308"),
    "PUT": Classification("PUT", "sensitive", "#f97316"),
    "DELETE": Classification("DELETE", "unhealthy", "#ef4444"),
}
METHOD_OTHER = Classification("Other", NEUTRAL_STYLE, NEUTRAL_COLOR)

CATEGORY_LABELS = {
    "VeryUnhealthy": "Very Unhealthy",
    "ClientError": "Client Error",
    "ServerError": "Server Error",
}


class Classifier:
    """
    Pure classifier for dashboard metrics.

    Maps AQI readings onto the six EPA-style bands, HTTP status codes onto
    success / client error / server error styles, and HTTP methods onto a fixed
    badge style. The same input always yields the same Classification.
    """

    def classify(self, metric: Union[int, float, str, None], kind: MetricKind) -> Classification:
        """
        Classifies a metric according to its kind.

        Args:
            metric: The raw metric value; None is allowed for every kind
            kind: Which classification scheme to apply

        Returns:
            The Classification for the value
        """
        if kind is MetricKind.AQI:
            return self.classify_aqi(metric)
        if kind is MetricKind.HTTP_STATUS:
            return self.classify_status(metric)
        if kind is MetricKind.HTTP_METHOD:
            return self.classify_method(metric)
        return AQI_UNKNOWN

    def classify_aqi(self, aqi: Union[int, float, str, None]) -> Classification:
        """
        Classifies an AQI reading into its band.

        Bands: <=50 Good, <=100 Moderate, <=150 Sensitive, <=200 Unhealthy,
        <=300 VeryUnhealthy, >300 Hazardous. Missing or non-numeric readings
        are Unknown.

        Args:
            aqi: AQI reading

        Returns:
            The band's Classification
        """
        value = coerce_number(aqi)
        if value is None:
            return AQI_UNKNOWN
        for upper_bound, band in AQI_BANDS:
            if value <= upper_bound:
                return band
        return AQI_HAZARDOUS

    def classify_status(self, status_code: Union[int, float, str, None]) -> Classification:
        """
        Classifies an HTTP status code.

        [200, 300) is success, [400, 500) a client error, >= 500 a server
        error. Everything else (1xx, 3xx, missing) gets no style.
        """
        value = coerce_number(status_code)
        if value is None:
            return STATUS_OTHER
        if 200 <= value < 300:
            return STATUS_SUCCESS
        if 400 <= value < 500:
            return STATUS_CLIENT_ERROR
        if value >= 500:
            return STATUS_SERVER_ERROR
        return STATUS_OTHER

    def classify_method(self, method: Optional[str]) -> Classification:
        """Returns the badge style for an HTTP method."""
        if not isinstance(method, str):
            return METHOD_OTHER
        return METHOD_STYLES.get(method.strip().upper(), METHOD_OTHER)

    def is_unhealthy(self, aqi: Union[int, float, str, None]) -> bool:
        """
        Determines whether an AQI reading counts as unhealthy air.

        Returns:
            True if AQI > 100, False otherwise (including missing readings)
        """
        value = coerce_number(aqi)
        return value is not None and value > UNHEALTHY_AQI_THRESHOLD


_default_classifier = Classifier()


def classify(metric: Union[int, float, str, None], kind: MetricKind = MetricKind.AQI) -> Classification:
    """Module-level shortcut for Classifier().classify."""
    return _default_classifier.classify(metric, kind)

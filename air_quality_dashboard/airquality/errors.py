"""
Error types for the Air Quality Dashboard.

Only the data source raises these. The classifier, aggregator and table engine
are total over the payload shapes they accept and never raise.
"""

from typing import Optional


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class UpstreamUnavailable(DashboardError):
    """
    Raised when the REST backend cannot deliver a usable response.

    Covers connection failures, timeouts, non-2xx status codes and bodies that
    are not valid JSON.

    Attributes:
        endpoint: Path of the endpoint that failed (e.g. "/cities")
        status_code: HTTP status code if a response was received, else None
    """

    def __init__(self, message: str, endpoint: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class CityNotFound(UpstreamUnavailable):
    """Raised when the AI recommendation endpoint does not know the city (HTTP 404)."""

    def __init__(self, city: str, endpoint: str = ""):
        super().__init__(f'City "{city}" not found', endpoint=endpoint, status_code=404)
        self.city = city

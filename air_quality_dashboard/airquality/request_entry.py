"""
Request entry module for the Air Quality Dashboard.

This module defines the RequestEntry dataclass, one row of the API analytics
timeline: a single request recorded by the backend's metrics interceptor.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .fields import coerce_number, coerce_text


@dataclass(frozen=True)
class RequestEntry:
    """
    Represents one recorded API request.

    The timestamp is kept exactly as received (ISO-8601 string) and only
    parsed when it is compared or displayed.

    Attributes:
        timestamp: ISO-8601 time the request was handled
        endpoint: Request path, e.g. "/api/cities"
        method: HTTP method
        status_code: HTTP status code returned, or None
        response_time: Handling time in milliseconds, or None
    """

    timestamp: str
    endpoint: str
    method: str
    status_code: Optional[int] = None
    response_time: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RequestEntry":
        """Builds an entry from one element of the /analytics/timeline response."""
        if not isinstance(payload, Mapping):
            payload = {}
        status = coerce_number(payload.get("statusCode"))
        return cls(
            timestamp=coerce_text(payload.get("timestamp")),
            endpoint=coerce_text(payload.get("endpoint")),
            method=coerce_text(payload.get("method")),
            status_code=int(status) if status is not None else None,
            response_time=coerce_number(payload.get("responseTime")),
        )

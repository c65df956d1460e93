"""
Analytics summary module for the Air Quality Dashboard.

This module defines the AnalyticsSummary dataclass holding the per-endpoint
statistic maps returned by GET /analytics/summary. The maps are kept in the
order the backend sent them, which becomes the chart category order.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

from .fields import coerce_number


def _number_map(value: Any) -> dict[str, float]:
    if not isinstance(value, Mapping):
        return {}
    result = {}
    for key, raw in value.items():
        number = coerce_number(raw)
        result[str(key)] = number if number is not None else 0.0
    return result


def _rate_map(value: Any) -> dict[str, dict[str, int]]:
    if not isinstance(value, Mapping):
        return {}
    result = {}
    for key, raw in value.items():
        rates = raw if isinstance(raw, Mapping) else {}
        success = coerce_number(rates.get("success"))
        error = coerce_number(rates.get("error"))
        result[str(key)] = {
            "success": int(success) if success is not None else 0,
            "error": int(error) if error is not None else 0,
        }
    return result


@dataclass(frozen=True)
class AnalyticsSummary:
    """
    API usage summary.

    Attributes:
        total_requests: Total number of recorded requests
        endpoint_stats: Request count per endpoint
        response_time_stats: Mean response time (ms) per endpoint
        success_error_rates: {"success": n, "error": m} per endpoint
    """

    total_requests: int = 0
    endpoint_stats: dict[str, float] = field(default_factory=dict)
    response_time_stats: dict[str, float] = field(default_factory=dict)
    success_error_rates: dict[str, dict[str, int]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AnalyticsSummary":
        """Builds the summary; absent maps become empty and absent counts 0."""
        if not isinstance(payload, Mapping):
            payload = {}
        total = coerce_number(payload.get("totalRequests"))
        return cls(
            total_requests=int(total) if total is not None else 0,
            endpoint_stats=_number_map(payload.get("endpointStats")),
            response_time_stats=_number_map(payload.get("responseTimeStats")),
            success_error_rates=_rate_map(payload.get("successErrorRates")),
        )

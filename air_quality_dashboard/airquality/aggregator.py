"""
Aggregator module for the Air Quality Dashboard.

This module contains the Aggregator class, which reduces the statistic maps and
row sets fetched from the backend into the scalars shown on summary cards and
the label/value series handed to the chart layer. Every operation is total:
empty or malformed input yields neutral results (0, 100%, empty series)
rather than errors or NaN.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from .classifier import Classifier
from .fields import CITY_FIELDS, TIMELINE_FIELDS, FieldKind, FieldRegistry, coerce_number
from .formatting import format_endpoint
from .global_stats import GlobalStats
from .analytics_summary import AnalyticsSummary
from .sort_spec import SortDirection

SUCCESS_COLOR = "#22c55e"
ERROR_COLOR = "#ef4444"
MODERATE_COLOR = "#eab308"

ROW_FIELDS = FieldRegistry(list(CITY_FIELDS) + list(TIMELINE_FIELDS))


def round_half_up(value: float, digits: int = 1) -> float:
    """Rounds half away from zero, the way the dashboard displays decimals."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class SeriesPoint:
    """
    One chart category.

    Attributes:
        label: Category label (x-axis or pie slice name)
        value: Numeric value
        color: Optional hex color for the point
    """

    label: str
    value: float
    color: Optional[str] = None


@dataclass(frozen=True)
class RateSummary:
    """Success/error totals across all endpoints."""

    total_success: int
    total_error: int
    success_rate_pct: float


@dataclass(frozen=True)
class SummaryScalars:
    """
    Headline numbers of the API analytics dashboard.

    Attributes:
        total_requests: Total recorded requests
        active_endpoints: Number of endpoints with statistics
        average_response_time_ms: Mean of the per-endpoint averages, rounded
        success_rate_pct: Overall success rate, one decimal
    """

    total_requests: int
    active_endpoints: int
    average_response_time_ms: int
    success_rate_pct: float


class Aggregator:
    """
    Reduces nested statistic maps and row sets into chart-ready data.
    """

    def __init__(self, classifier: Optional[Classifier] = None):
        self.classifier = classifier or Classifier()

    def aggregate_rates(self, success_error_map: Optional[Mapping[str, Any]]) -> RateSummary:
        """
        Sums success and error counts across all keys.

        The success rate is 100 * success / (success + error) rounded to one
        decimal, and 100.0 when there were no requests at all.

        Args:
            success_error_map: Key -> {"success": n, "error": m}

        Returns:
            RateSummary with totals and rate
        """
        total_success = 0
        total_error = 0
        for rates in (success_error_map or {}).values():
            if not isinstance(rates, Mapping):
                continue
            total_success += int(coerce_number(rates.get("success")) or 0)
            total_error += int(coerce_number(rates.get("error")) or 0)

        total = total_success + total_error
        if total == 0:
            rate = 100.0
        else:
            rate = round_half_up(100 * total_success / total, 1)
        return RateSummary(total_success, total_error, rate)

    def average_of(self, value_map: Optional[Mapping[str, Any]]) -> float:
        """Mean of the map's values (missing values count as 0); 0 for an empty map."""
        values = list((value_map or {}).values())
        if not values:
            return 0.0
        return sum(coerce_number(value) or 0.0 for value in values) / len(values)

    def top_n(
        self,
        rows: Iterable[Any],
        key: str,
        n: int,
        direction: SortDirection = SortDirection.DESCENDING,
        fields: FieldRegistry = ROW_FIELDS,
    ) -> list:
        """
        Ranks rows by a field and returns the first n.

        Rows without a value for the field are dropped before ranking. Ties
        keep their input order.

        Args:
            rows: Rows to rank (not modified)
            key: Field to rank by
            n: Maximum number of rows returned
            direction: DESCENDING for "top", ASCENDING for "bottom"
            fields: Registry resolving ``key``

        Returns:
            Up to n rows in rank order
        """
        if n <= 0:
            return []
        field = fields.get(key)

        def has_value(row: Any) -> bool:
            value = field.value_of(row)
            if field.kind is FieldKind.NUMBER:
                return coerce_number(value) is not None
            return value is not None

        ranked = [row for row in rows if has_value(row)]
        ranked.sort(key=field.sort_key, reverse=direction is SortDirection.DESCENDING)
        return ranked[:n]

    def to_series(
        self,
        value_map: Optional[Mapping[str, Any]],
        label: Optional[Callable[[str], str]] = None,
    ) -> list[SeriesPoint]:
        """
        Turns a map into chart points, keeping the map's key order.

        Args:
            value_map: Category -> value
            label: Optional function mapping keys to display labels

        Returns:
            One SeriesPoint per key; missing values become 0
        """
        points = []
        for key, value in (value_map or {}).items():
            name = label(key) if label else str(key)
            points.append(SeriesPoint(name, coerce_number(value) or 0.0))
        return points

    # ==================== Analytics dashboard ====================

    def endpoint_series(self, endpoint_stats: Optional[Mapping[str, Any]]) -> list[SeriesPoint]:
        """Request counts per endpoint, labelled without the /api prefix."""
        return self.to_series(endpoint_stats, label=format_endpoint)

    def response_time_series(self, response_time_stats: Optional[Mapping[str, Any]]) -> list[SeriesPoint]:
        """Mean response time per endpoint, rounded to two decimals."""
        return [
            SeriesPoint(point.label, round_half_up(point.value, 2))
            for point in self.to_series(response_time_stats, label=format_endpoint)
        ]

    def success_error_series(self, success_error_map: Optional[Mapping[str, Any]]) -> list[SeriesPoint]:
        rates = self.aggregate_rates(success_error_map)
        return [
            SeriesPoint("Success (2xx)", rates.total_success, SUCCESS_COLOR),
            SeriesPoint("Errors (4xx/5xx)", rates.total_error, ERROR_COLOR),
        ]

    def summarize(self, summary: Union[AnalyticsSummary, Mapping[str, Any], None]) -> SummaryScalars:
        """
        Computes the analytics headline numbers.

        Args:
            summary: AnalyticsSummary or the raw /analytics/summary payload

        Returns:
            SummaryScalars
        """
        if not isinstance(summary, AnalyticsSummary):
            summary = AnalyticsSummary.from_dict(summary or {})
        average = self.average_of(summary.response_time_stats)
        return SummaryScalars(
            total_requests=summary.total_requests,
            active_endpoints=len(summary.endpoint_stats),
            average_response_time_ms=math.floor(average + 0.5),
            success_rate_pct=self.aggregate_rates(summary.success_error_rates).success_rate_pct,
        )

    # ==================== Air quality dashboard ====================

    def aqi_distribution_series(self, stats: Union[GlobalStats, Mapping[str, Any], None]) -> list[SeriesPoint]:
        """Number of cities per broad AQI band; an absent moderate count is 0."""
        if not isinstance(stats, GlobalStats):
            stats = GlobalStats.from_dict(stats or {})
        return [
            SeriesPoint("Good (0-50)", stats.cities_with_good_air, SUCCESS_COLOR),
            SeriesPoint("Moderate (51-100)", stats.cities_with_moderate_air, MODERATE_COLOR),
            SeriesPoint("Unhealthy (101+)", stats.cities_with_unhealthy_air, ERROR_COLOR),
        ]

    def top_polluted_series(self, rows: Iterable[Any], n: int = 10) -> list[SeriesPoint]:
        """The n cities with the highest AQI, each colored by its AQI band."""
        points = []
        for row in self.top_n(rows, "aqi", n, SortDirection.DESCENDING, CITY_FIELDS):
            aqi = coerce_number(CITY_FIELDS.get("aqi").value_of(row))
            city = CITY_FIELDS.get("city").text_of(row)
            points.append(SeriesPoint(city, aqi, self.classifier.classify_aqi(aqi).color))
        return points


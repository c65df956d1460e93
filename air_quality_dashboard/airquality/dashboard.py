"""
Dashboard controller module for the Air Quality Dashboard.

This module contains the AirQualityDashboard and AnalyticsDashboard classes,
which sit between the DataSource and the view. Each owns the snapshots of one
dashboard (table engines plus summary payloads), replaces them atomically on a
successful fetch, and keeps them untouched on failure while recording an error
message for the view to show.

Each refresh is stamped with a generation number. A response belonging to an
older refresh than the one already applied is discarded, so when refreshes
overlap the most recently started one wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from .aggregator import Aggregator, SeriesPoint, SummaryScalars
from .ai_recommendation import AiRecommendation
from .analytics_summary import AnalyticsSummary
from .city_reading import CityReading
from .data_source import DataSource
from .errors import UpstreamUnavailable
from .formatting import format_last_updated
from .global_stats import GlobalStats
from .request_entry import RequestEntry
from .table_engine import TableEngine

logger = logging.getLogger(__name__)


class _Generations:
    """Tracks the newest started and applied refresh per resource."""

    def __init__(self):
        self._started = 0
        self._applied: dict[str, int] = {}

    def start(self) -> int:
        self._started += 1
        return self._started

    def is_latest(self, generation: int) -> bool:
        return generation == self._started

    def accept(self, resource: str, generation: int) -> bool:
        if generation < self._applied.get(resource, 0):
            logger.info("Discarding stale %s response from refresh #%d", resource, generation)
            return False
        self._applied[resource] = generation
        return True


class AirQualityDashboard:
    """
    Controller of the global air quality dashboard.

    Holds the global statistics snapshot and the cities table. The global
    stats and the cities list are fetched independently: one failing does not
    discard the other.
    """

    GLOBAL_ERROR = "Failed to load global statistics. Please check if the API server is running."
    CITIES_ERROR = "Failed to load city data. Please check if the API server is running."
    REFRESH_ERROR = "Refresh failed. Please check if the API server is running."

    def __init__(self, source: DataSource, aggregator: Optional[Aggregator] = None, top_n: int = 10):
        self.source = source
        self.aggregator = aggregator or Aggregator()
        self.top_n = top_n
        self.table = TableEngine.for_cities()
        self.global_stats: Optional[GlobalStats] = None
        self.recommendation: Optional[AiRecommendation] = None
        self.last_error: Optional[str] = None
        self.recommendation_error: Optional[str] = None
        self._generations = _Generations()

    def refresh(self, trigger_backend: bool = False) -> bool:
        """
        Reloads global statistics and cities.

        Args:
            trigger_backend: If True, ask the backend to re-pull measurements
                first. If the backend cannot be reached nothing else is
                fetched; an HTTP error from it is logged and the data is
                reloaded anyway.

        Returns:
            True if every fetch succeeded, False otherwise (see last_error)
        """
        generation = self._generations.start()
        errors = []

        if trigger_backend:
            try:
                self.source.trigger_refresh()
            except UpstreamUnavailable as e:
                if e.status_code is None:
                    logger.error("Backend refresh failed: %s", e)
                    self._report(generation, self.REFRESH_ERROR)
                    return False
                logger.warning("Backend refresh returned an error, reloading anyway: %s", e)

        try:
            self.apply_global_stats(self.source.fetch_global_stats(), generation)
        except UpstreamUnavailable as e:
            logger.error("Error fetching global stats: %s", e)
            errors.append(self.GLOBAL_ERROR)

        try:
            self.apply_cities(self.source.fetch_cities(), generation)
        except UpstreamUnavailable as e:
            logger.error("Error fetching cities data: %s", e)
            errors.append(self.CITIES_ERROR)

        self._report(generation, " ".join(errors) if errors else None)
        return not errors

    def _report(self, generation: int, error: Optional[str]) -> None:
        # a refresh overtaken by a newer one must not overwrite its outcome
        if self._generations.is_latest(generation):
            self.last_error = error

    def apply_global_stats(self, payload: Any, generation: int) -> bool:
        """Replaces the global statistics snapshot unless the payload is stale."""
        if not self._generations.accept("global", generation):
            return False
        self.global_stats = GlobalStats.from_dict(payload)
        logger.info("Global stats loaded: %d cities", self.global_stats.total_cities)
        return True

    def apply_cities(self, payload: Iterable[Any], generation: int) -> bool:
        """Replaces the cities table snapshot unless the payload is stale."""
        if not self._generations.accept("cities", generation):
            return False
        rows = [CityReading.from_dict(item) for item in (payload or [])]
        for row in rows:
            is_valid, reason = row.validate()
            if not is_valid:
                logger.debug("Suspicious city row %r: %s", row.city, reason)
        self.table.set_rows(rows)
        logger.info("Cities data loaded: %d rows", len(rows))
        return True

    def city_rows(self) -> list:
        return self.table.project()

    def aqi_distribution(self) -> list[SeriesPoint]:
        return self.aggregator.aqi_distribution_series(self.global_stats)

    def top_polluted(self) -> list[SeriesPoint]:
        # ranks the full snapshot, independent of the table filter
        return self.aggregator.top_polluted_series(self.table.rows, self.top_n)

    def recommend(self, city: str) -> Optional[AiRecommendation]:
        """
        Fetches AI recommendations for a city.

        Returns:
            The recommendation, or None with recommendation_error set
        """
        try:
            payload = self.source.fetch_ai_recommendation(city)
        except (ValueError, UpstreamUnavailable) as e:
            logger.error("Error fetching AI recommendations for %r: %s", city, e)
            self.recommendation_error = str(e)
            return None
        self.recommendation = AiRecommendation.from_dict(payload)
        self.recommendation_error = None
        return self.recommendation


class AnalyticsDashboard:
    """
    Controller of the API analytics dashboard.

    The summary and the timeline are fetched together and only replaced when
    both arrive, so the cards and the table always describe the same moment.
    """

    LOAD_ERROR = "Failed to load analytics data. Make sure the API server is running."

    def __init__(self, source: DataSource, aggregator: Optional[Aggregator] = None):
        self.source = source
        self.aggregator = aggregator or Aggregator()
        self.table = TableEngine.for_timeline()
        self.summary = AnalyticsSummary()
        self.last_error: Optional[str] = None
        self.last_updated: Optional[datetime] = None
        self._generations = _Generations()

    def refresh(self) -> bool:
        """
        Reloads the summary and the request timeline.

        Returns:
            True on success; False if either fetch failed (previous data kept)
        """
        generation = self._generations.start()
        try:
            summary = self.source.fetch_summary()
            timeline = self.source.fetch_timeline()
        except UpstreamUnavailable as e:
            logger.error("Error loading analytics data: %s", e)
            if self._generations.is_latest(generation):
                self.last_error = self.LOAD_ERROR
            return False

        self.apply(summary, timeline, generation)
        if self._generations.is_latest(generation):
            self.last_error = None
        return True

    def apply(self, summary: Any, timeline: Optional[Iterable[Any]], generation: int) -> bool:
        """Replaces both snapshots unless the payloads are stale."""
        if not self._generations.accept("analytics", generation):
            return False
        self.summary = AnalyticsSummary.from_dict(summary)
        self.table.set_rows(RequestEntry.from_dict(item) for item in (timeline or []))
        self.last_updated = datetime.now(timezone.utc)
        logger.info(
            "Analytics data loaded: totalRequests=%d, timelineCount=%d",
            self.summary.total_requests,
            len(self.table.rows),
        )
        return True

    def scalars(self) -> SummaryScalars:
        return self.aggregator.summarize(self.summary)

    def endpoint_series(self) -> list[SeriesPoint]:
        return self.aggregator.endpoint_series(self.summary.endpoint_stats)

    def response_time_series(self) -> list[SeriesPoint]:
        return self.aggregator.response_time_series(self.summary.response_time_stats)

    def success_error_series(self) -> list[SeriesPoint]:
        return self.aggregator.success_error_series(self.summary.success_error_rates)

    def timeline_rows(self) -> list:
        return self.table.project()

    def last_updated_label(self) -> str:
        if self.last_updated is None:
            return ""
        return f"Last Updated: {format_last_updated(self.last_updated)}"

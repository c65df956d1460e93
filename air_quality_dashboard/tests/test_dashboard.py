"""
Tests for the dashboard controllers.

Tests cover:
- Loading snapshots from the data source
- Failure handling: previous snapshots are kept and an error message is set
- Stale responses from overlapping refreshes are discarded
- AI recommendation lookups
"""

import logging
from unittest.mock import MagicMock

import pytest

from airquality.aggregator import SummaryScalars
from airquality.config import DashboardConfig
from airquality.dashboard import AirQualityDashboard, AnalyticsDashboard
from airquality.data_source import DataSource
from airquality.errors import CityNotFound, UpstreamUnavailable


def make_response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.json.return_value = payload
    return response


@pytest.fixture
def mock_source():
    """Fixture providing a DataSource serving the built-in sample payloads."""
    return DataSource(DashboardConfig(source_mode="mock"))


class TestAirQualityDashboard:
    """Test suite for AirQualityDashboard."""

    @pytest.fixture
    def dashboard(self, mock_source):
        return AirQualityDashboard(mock_source, top_n=3)

    # ==================== Loading ====================

    def test_refresh_loads_snapshots(self, dashboard):
        assert dashboard.refresh() is True
        assert dashboard.last_error is None
        assert dashboard.global_stats.total_cities == 7
        assert len(dashboard.city_rows()) == 8

    def test_rows_keep_api_order(self, dashboard):
        dashboard.refresh()
        assert [row.city for row in dashboard.city_rows()][:3] == ["Reykjavik", "Paris", "Paramaribo"]

    def test_top_polluted(self, dashboard):
        dashboard.refresh()
        assert [p.label for p in dashboard.top_polluted()] == ["Delhi", "Beijing", "Lagos"]

    def test_top_polluted_ignores_filter(self, dashboard):
        dashboard.refresh()
        dashboard.table.set_filter("paris")
        assert len(dashboard.city_rows()) == 1
        assert dashboard.top_polluted()[0].label == "Delhi"

    def test_aqi_distribution(self, dashboard):
        dashboard.refresh()
        assert [p.value for p in dashboard.aqi_distribution()] == [2, 2, 3]

    def test_aqi_distribution_before_load(self, dashboard):
        assert [p.value for p in dashboard.aqi_distribution()] == [0, 0, 0]

    def test_sort_and_filter_survive_refresh(self, dashboard):
        dashboard.refresh()
        dashboard.table.set_filter("pa")
        dashboard.table.toggle_sort("aqi")
        dashboard.refresh()
        assert [row.city for row in dashboard.city_rows()] == ["Paramaribo", "Paris"]

    # ==================== Failure handling ====================

    def test_failed_cities_fetch_keeps_previous_rows(self, dashboard, mock_source):
        dashboard.refresh()
        before = dashboard.table.rows
        mock_source.fetch_cities = MagicMock(side_effect=UpstreamUnavailable("down", endpoint="/cities"))

        assert dashboard.refresh() is False
        assert dashboard.table.rows is before
        assert dashboard.last_error == AirQualityDashboard.CITIES_ERROR
        assert dashboard.global_stats is not None

    def test_both_fetches_fail(self, mock_source):
        mock_source.fetch_global_stats = MagicMock(side_effect=UpstreamUnavailable("down"))
        mock_source.fetch_cities = MagicMock(side_effect=UpstreamUnavailable("down"))
        dashboard = AirQualityDashboard(mock_source)

        assert dashboard.refresh() is False
        assert dashboard.global_stats is None
        assert dashboard.city_rows() == []
        assert AirQualityDashboard.GLOBAL_ERROR in dashboard.last_error
        assert AirQualityDashboard.CITIES_ERROR in dashboard.last_error

    def test_error_cleared_after_success(self, dashboard, mock_source):
        original = mock_source.fetch_cities
        mock_source.fetch_cities = MagicMock(side_effect=UpstreamUnavailable("down"))
        dashboard.refresh()
        mock_source.fetch_cities = original
        assert dashboard.refresh() is True
        assert dashboard.last_error is None

    def test_unreachable_backend_refresh_stops(self, mock_source):
        mock_source.trigger_refresh = MagicMock(side_effect=UpstreamUnavailable("Request to /refresh failed"))
        mock_source.fetch_cities = MagicMock()
        dashboard = AirQualityDashboard(mock_source)

        assert dashboard.refresh(trigger_backend=True) is False
        assert dashboard.last_error == AirQualityDashboard.REFRESH_ERROR
        mock_source.fetch_cities.assert_not_called()

    def test_backend_refresh_http_error_still_reloads(self):
        """An HTTP 500 from POST /refresh is logged and the data is reloaded."""
        responses = {
            "/refresh": make_response(500),
            "/global": make_response(200, {"totalCities": 1}),
            "/cities": make_response(200, [{"city": "Paris", "country": "FR", "aqi": 54}]),
        }
        session = MagicMock()
        session.request.side_effect = lambda method, url, timeout: responses[url.rsplit("/api", 1)[1]]
        source = DataSource(DashboardConfig(source_mode="http", api_base_url="http://backend.test/api"), session=session)
        dashboard = AirQualityDashboard(source)

        assert dashboard.refresh(trigger_backend=True) is True
        assert [row.city for row in dashboard.city_rows()] == ["Paris"]
        assert dashboard.global_stats.total_cities == 1
        assert dashboard.last_error is None

    def test_backend_refresh_then_reload(self, dashboard, mock_source):
        mock_source.trigger_refresh = MagicMock()
        assert dashboard.refresh(trigger_backend=True) is True
        mock_source.trigger_refresh.assert_called_once_with()

    # ==================== Overlapping refreshes ====================

    def test_stale_cities_response_is_discarded(self, dashboard):
        older = dashboard._generations.start()
        newer = dashboard._generations.start()

        assert dashboard.apply_cities([{"city": "New"}], newer) is True
        assert dashboard.apply_cities([{"city": "Old"}], older) is False
        assert [row.city for row in dashboard.city_rows()] == ["New"]

    def test_stale_global_response_is_discarded(self, dashboard):
        older = dashboard._generations.start()
        newer = dashboard._generations.start()

        dashboard.apply_global_stats({"totalCities": 2}, newer)
        dashboard.apply_global_stats({"totalCities": 1}, older)
        assert dashboard.global_stats.total_cities == 2

    def test_resources_are_tracked_separately(self, dashboard):
        older = dashboard._generations.start()
        newer = dashboard._generations.start()

        dashboard.apply_global_stats({"totalCities": 2}, newer)
        assert dashboard.apply_cities([{"city": "A"}], older) is True

    def test_in_order_responses_all_apply(self, dashboard):
        first = dashboard._generations.start()
        assert dashboard.apply_cities([{"city": "A"}], first) is True
        second = dashboard._generations.start()
        assert dashboard.apply_cities([{"city": "B"}], second) is True

    def test_overtaken_refresh_does_not_overwrite_error(self, dashboard, mock_source):
        """A refresh that finishes after a newer one started leaves last_error alone."""
        def start_newer_refresh():
            dashboard._generations.start()
            raise UpstreamUnavailable("down")

        mock_source.fetch_cities = MagicMock(side_effect=start_newer_refresh)
        assert dashboard.refresh() is False
        assert dashboard.last_error is None

    def test_invalid_rows_are_logged_and_kept(self, dashboard, caplog):
        generation = dashboard._generations.start()
        with caplog.at_level(logging.DEBUG, logger="airquality.dashboard"):
            dashboard.apply_cities([{"city": "", "aqi": 5}, {"city": "Oslo", "aqi": -2}], generation)

        assert len(dashboard.table.rows) == 2
        assert "city must not be empty" in caplog.text
        assert "aqi must be >= 0" in caplog.text

    # ==================== AI recommendations ====================

    def test_recommend(self, dashboard):
        rec = dashboard.recommend("Beijing")
        assert rec is dashboard.recommendation
        assert rec.aqi_category == "Unhealthy"
        assert dashboard.recommendation_error is None

    def test_recommend_blank(self, dashboard):
        assert dashboard.recommend("  ") is None
        assert dashboard.recommendation_error == "Please enter a city name to get AI recommendations."

    def test_recommend_unknown_city_keeps_previous(self, dashboard):
        previous = dashboard.recommend("Paris")
        assert dashboard.recommend("Atlantis") is None
        assert dashboard.recommendation_error == 'City "Atlantis" not found'
        assert dashboard.recommendation is previous

    def test_recommend_upstream_failure(self, mock_source):
        mock_source.fetch_ai_recommendation = MagicMock(side_effect=CityNotFound("Nowhere"))
        dashboard = AirQualityDashboard(mock_source)
        dashboard.recommend("Nowhere")
        assert "Nowhere" in dashboard.recommendation_error


class TestAnalyticsDashboard:
    """Test suite for AnalyticsDashboard."""

    @pytest.fixture
    def dashboard(self, mock_source):
        return AnalyticsDashboard(mock_source)

    def test_initial_state(self, dashboard):
        assert dashboard.scalars() == SummaryScalars(0, 0, 0, 100.0)
        assert dashboard.timeline_rows() == []
        assert dashboard.last_updated_label() == ""

    def test_refresh(self, dashboard):
        assert dashboard.refresh() is True
        assert dashboard.scalars() == SummaryScalars(42, 3, 289, 92.9)
        assert dashboard.last_updated is not None
        assert dashboard.last_updated_label().startswith("Last Updated: ")

    def test_timeline_newest_first(self, dashboard):
        dashboard.refresh()
        endpoints = [row.endpoint for row in dashboard.timeline_rows()]
        assert endpoints[0] == "/api/ai/recommendations/Delhi"
        assert endpoints[-1] == "/api/global"

    def test_series(self, dashboard):
        dashboard.refresh()
        assert [p.label for p in dashboard.endpoint_series()] == ["/cities", "/global", "/ai/recommendations"]
        assert [p.value for p in dashboard.response_time_series()] == [35.46, 12.5, 820.0]
        assert [p.value for p in dashboard.success_error_series()] == [39, 3]

    def test_failure_keeps_previous_data(self, dashboard, mock_source):
        dashboard.refresh()
        rows = dashboard.table.rows
        updated = dashboard.last_updated
        mock_source.fetch_timeline = MagicMock(side_effect=UpstreamUnavailable("down"))

        assert dashboard.refresh() is False
        assert dashboard.last_error == AnalyticsDashboard.LOAD_ERROR
        assert dashboard.table.rows is rows
        assert dashboard.last_updated == updated
        assert dashboard.scalars().total_requests == 42

    def test_overtaken_refresh_does_not_overwrite_error(self, dashboard, mock_source):
        def start_newer_refresh():
            dashboard._generations.start()
            raise UpstreamUnavailable("down")

        mock_source.fetch_timeline = MagicMock(side_effect=start_newer_refresh)
        assert dashboard.refresh() is False
        assert dashboard.last_error is None

    def test_stale_analytics_discarded(self, dashboard):
        older = dashboard._generations.start()
        newer = dashboard._generations.start()

        dashboard.apply({"totalRequests": 9}, [], newer)
        assert dashboard.apply({"totalRequests": 1}, [{"endpoint": "/old"}], older) is False
        assert dashboard.summary.total_requests == 9
        assert dashboard.timeline_rows() == []

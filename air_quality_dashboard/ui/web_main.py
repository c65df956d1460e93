"""
Web UI module for the Air Quality Dashboard.

This module provides a Streamlit-based view of the two dashboards: global air
quality (summary cards, charts, searchable cities table, AI recommendations)
and API analytics (summary cards, per-endpoint charts, request timeline). All
numbers and orderings come from the airquality package; this module only
lays them out.
"""

import sys
from pathlib import Path
from typing import Any, List

# Add project root to Python path to enable imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pandas as pd
import streamlit as st
from streamlit_autorefresh import st_autorefresh

from airquality.aggregator import SeriesPoint
from airquality.classifier import Classifier, MetricKind
from airquality.config import DashboardConfig
from airquality.dashboard import AirQualityDashboard, AnalyticsDashboard
from airquality.data_source import DataSource
from airquality.formatting import (
    format_aqi,
    format_endpoint,
    format_number,
    format_percent,
    format_pollutant,
    format_response_time,
    format_timestamp,
)
from airquality.logging_config import setup_logging

CITY_COLUMNS = {"city": "City", "country": "Country", "aqi": "AQI", "pm25": "PM2.5", "pm10": "PM10"}
TIMELINE_COLUMNS = {
    "timestamp": "Timestamp",
    "endpoint": "Endpoint",
    "method": "Method",
    "statusCode": "Status",
    "responseTime": "Response Time",
}

classifier = Classifier()


def init_session() -> None:
    """Creates the controllers once per browser session."""
    if "config" not in st.session_state:
        config = DashboardConfig.from_env()
        setup_logging(config.log_level, config.log_file)
        source = DataSource(config)
        st.session_state.config = config
        st.session_state.air_dashboard = AirQualityDashboard(source, top_n=config.top_n)
        st.session_state.analytics_dashboard = AnalyticsDashboard(source)
        st.session_state.air_dashboard.refresh()
        st.session_state.analytics_dashboard.refresh()


def series_frame(points: List[SeriesPoint], value_name: str) -> pd.DataFrame:
    """Converts chart points to a frame indexed by label."""
    frame = pd.DataFrame(
        {"label": [p.label for p in points], value_name: [p.value for p in points]}
    )
    return frame.set_index("label")


def sort_controls(engine: Any, columns: dict, key_prefix: str) -> None:
    """One button per column; clicking toggles the engine's sort."""
    buttons = st.columns(len(columns))
    for button_col, (key, title) in zip(buttons, columns.items()):
        arrow = ""
        if engine.sort.key == key:
            arrow = " ▲" if engine.sort.direction.value == "asc" else " ▼"
        if button_col.button(f"{title}{arrow}", key=f"{key_prefix}_{key}", use_container_width=True):
            engine.toggle_sort(key)
            st.rerun()


def render_air_quality(dashboard: AirQualityDashboard) -> None:
    st.header("🌍 Global Air Quality")

    if st.button("🔄 Refresh", key="air_refresh"):
        with st.spinner("Refreshing..."):
            dashboard.refresh(trigger_backend=True)

    if dashboard.last_error:
        st.error(dashboard.last_error)

    stats = dashboard.global_stats
    if stats is not None:
        cards = st.columns(5)
        cards[0].metric("Cities", format_number(stats.total_cities))
        cards[1].metric("Countries", format_number(stats.total_countries))
        cards[2].metric("Average AQI", stats.rounded_average_aqi)
        cards[3].metric("Good air", format_number(stats.cities_with_good_air))
        cards[4].metric("Unhealthy air", format_number(stats.cities_with_unhealthy_air))

        extremes = st.columns(2)
        extremes[0].metric("🌿 Cleanest city", stats.cleanest_city or "--", format_aqi(stats.cleanest_aqi), delta_color="off")
        extremes[1].metric("🏭 Most polluted city", stats.most_polluted_city or "--", format_aqi(stats.most_polluted_aqi), delta_color="off")
        if stats.last_updated:
            st.caption(f"Last Updated: {stats.last_updated}")

        chart_left, chart_right = st.columns(2)
        with chart_left:
            st.subheader("AQI distribution")
            st.bar_chart(series_frame(dashboard.aqi_distribution(), "Cities"))
        with chart_right:
            st.subheader(f"Top {dashboard.top_n} most polluted")
            st.bar_chart(series_frame(dashboard.top_polluted(), "AQI"), horizontal=True)

    st.subheader("Cities")
    search = st.text_input("Search city or country", key="city_search")
    dashboard.table.set_filter(search)
    sort_controls(dashboard.table, CITY_COLUMNS, "city_sort")

    rows = dashboard.city_rows()
    st.caption(dashboard.table.count_label("cities"))
    if not rows:
        st.info("No cities match your search.")
    else:
        table = pd.DataFrame([
            {
                "#": index,
                "City": row.city,
                "Country": row.country,
                "AQI": format_aqi(row.aqi),
                "PM2.5": format_pollutant(row.pm25),
                "PM10": format_pollutant(row.pm10),
                "Category": classifier.classify_aqi(row.aqi).label,
            }
            for index, row in enumerate(rows, start=1)
        ])
        st.dataframe(table, use_container_width=True, hide_index=True)

    st.subheader("🤖 AI recommendations")
    city = st.text_input("City", key="ai_city")
    if st.button("Get recommendations", key="ai_button"):
        with st.spinner("Generating AI recommendations..."):
            dashboard.recommend(city)

    if dashboard.recommendation_error:
        st.error(dashboard.recommendation_error)
    elif dashboard.recommendation is not None:
        rec = dashboard.recommendation
        st.markdown(f"#### {rec.city}, {rec.country}")
        st.markdown(f"AQI: **{format_aqi(rec.aqi)}** · {rec.aqi_category}")
        st.write(rec.overall_assessment)
        card_cols = st.columns(max(1, len(rec.recommendations)))
        for card_col, card in zip(card_cols, rec.recommendations):
            with card_col:
                st.markdown(f"{card.icon} **{card.title}**")
                st.caption(f"Severity: {card.severity}")
                st.write(card.description)


def render_analytics(dashboard: AnalyticsDashboard) -> None:
    st.header("📈 API Analytics")

    if st.button("🔄 Refresh", key="analytics_refresh"):
        with st.spinner("Refreshing..."):
            dashboard.refresh()

    if dashboard.last_error:
        st.error(dashboard.last_error)

    scalars = dashboard.scalars()
    cards = st.columns(4)
    cards[0].metric("Total requests", format_number(scalars.total_requests))
    cards[1].metric("Active endpoints", scalars.active_endpoints)
    cards[2].metric("Avg response time", f"{scalars.average_response_time_ms}ms")
    cards[3].metric("Success rate", format_percent(scalars.success_rate_pct))
    if dashboard.last_updated:
        st.caption(dashboard.last_updated_label())

    left, middle, right = st.columns(3)
    with left:
        st.subheader("Requests per endpoint")
        st.bar_chart(series_frame(dashboard.endpoint_series(), "Requests"))
    with middle:
        st.subheader("Response time (ms)")
        st.bar_chart(series_frame(dashboard.response_time_series(), "ms"), horizontal=True)
    with right:
        st.subheader("Success vs errors")
        st.bar_chart(series_frame(dashboard.success_error_series(), "Requests"))

    st.subheader("Request timeline")
    sort_controls(dashboard.table, TIMELINE_COLUMNS, "timeline_sort")
    rows = dashboard.timeline_rows()
    if not rows:
        st.info("No requests recorded yet")
        return

    table = pd.DataFrame([
        {
            "#": index,
            "Timestamp": format_timestamp(row.timestamp),
            "Endpoint": format_endpoint(row.endpoint),
            "Method": row.method,
            "Status": row.status_code,
            "Response Time": format_response_time(row.response_time),
        }
        for index, row in enumerate(rows, start=1)
    ])

    def status_style(value: Any) -> str:
        color = classifier.classify(value, MetricKind.HTTP_STATUS).color
        return f"color: {color};"

    st.dataframe(table.style.map(status_style, subset=["Status"]), use_container_width=True, hide_index=True)


def main() -> None:
    """
    Main function that runs the Streamlit web interface.

    Sets up the page, lets the user pick a dashboard in the sidebar, and
    re-renders on the configured auto-refresh interval.
    """
    st.set_page_config(page_title="Air Quality Tracker", layout="wide")
    init_session()
    config: DashboardConfig = st.session_state.config

    page = st.sidebar.radio("Dashboard", ["Air quality", "API analytics"])
    st.sidebar.caption(f"Data source: {config.source_mode}")

    auto_refresh = st.sidebar.checkbox("Auto-refresh", value=False)
    if auto_refresh:
        count = st_autorefresh(interval=config.refresh_interval_seconds * 1000, limit=None, key="auto_refresh")
        # count only increases when the timer fires, not on other reruns
        if count and count != st.session_state.get("last_refresh_count"):
            st.session_state.last_refresh_count = count
            st.session_state.air_dashboard.refresh()
            st.session_state.analytics_dashboard.refresh()

    if page == "Air quality":
        render_air_quality(st.session_state.air_dashboard)
    else:
        render_analytics(st.session_state.analytics_dashboard)


if __name__ == "__main__":
    main()

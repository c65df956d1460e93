"""
Air Quality Dashboard core package.

In-memory data engine behind the air-quality and API-analytics dashboards:
metric classification, aggregation into chart series, and sortable/filterable
table projections.
"""

__version__ = "0.1.0"

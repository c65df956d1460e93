"""
Table engine module for the Air Quality Dashboard.

This module contains the TableEngine class, which owns the current row
snapshot of one table view together with its active sort and filter, and
produces the ordered, filtered projection the view renders. One engine is
constructed per view; all state changes go through its methods.
"""

import logging
from typing import Any, Iterable, Optional, Sequence

from .fields import CITY_FIELDS, MISSING_FIELD, TIMELINE_FIELDS, FieldRegistry
from .filter_spec import FilterSpec
from .sort_spec import SortDirection, SortSpec

logger = logging.getLogger(__name__)


def filter_rows(rows: Iterable[Any], spec: FilterSpec) -> list:
    """Keeps the rows matching the filter, in their original order."""
    if spec.is_empty:
        return list(rows)
    return [row for row in rows if spec.matches(row)]


def sort_rows(rows: Iterable[Any], spec: SortSpec, fields: FieldRegistry) -> list:
    """
    Sorts rows by the active sort column.

    The sort is stable in both directions: rows with equal keys keep their
    relative input order. Inactive specs and unknown keys leave the order
    unchanged.

    Args:
        rows: Rows to sort (not modified)
        spec: Active sort
        fields: Field registry used to resolve the sort key

    Returns:
        A new list of the rows in sorted order
    """
    rows = list(rows)
    if not spec.is_active:
        return rows
    field = fields.get(spec.key)
    if field is MISSING_FIELD:
        return rows
    # list.sort stays stable with reverse=True
    return sorted(rows, key=field.sort_key, reverse=spec.direction is SortDirection.DESCENDING)


class TableEngine:
    """
    In-memory sortable, filterable table.

    Holds an immutable snapshot of rows that is replaced wholesale on every
    successful fetch. The visible projection is always the filtered rows in
    sort order, recomputed from the current snapshot on demand.
    """

    def __init__(
        self,
        fields: FieldRegistry,
        filter_keys: Sequence[str] = (),
        initial_sort: Optional[SortSpec] = None,
    ):
        """
        Initialize an empty table.

        Args:
            fields: Columns of this view
            filter_keys: Text columns searched by the free-text filter
            initial_sort: Sort applied before any column is selected
        """
        self._fields = fields
        self._rows: tuple = ()
        self._sort = initial_sort or SortSpec()
        self._filter = FilterSpec("", fields.select(filter_keys))

    @classmethod
    def for_cities(cls) -> "TableEngine":
        """Cities table: searchable by city and country, initially in API order."""
        return cls(CITY_FIELDS, filter_keys=("city", "country"))

    @classmethod
    def for_timeline(cls) -> "TableEngine":
        """Request timeline: no search, newest requests first."""
        return cls(TIMELINE_FIELDS, initial_sort=SortSpec("timestamp", SortDirection.DESCENDING))

    @property
    def rows(self) -> tuple:
        return self._rows

    @property
    def sort(self) -> SortSpec:
        return self._sort

    @property
    def filter(self) -> FilterSpec:
        return self._filter

    @property
    def fields(self) -> FieldRegistry:
        return self._fields

    def set_rows(self, new_rows: Optional[Iterable[Any]]) -> None:
        """Replaces the snapshot; sort and filter are kept."""
        self._rows = tuple(new_rows) if new_rows is not None else ()
        logger.debug("Table snapshot replaced with %d rows", len(self._rows))

    def set_filter(self, text: Optional[str]) -> None:
        self._filter = self._filter.with_text(text)

    def toggle_sort(self, key: str) -> SortSpec:
        """
        Applies a column selection to the sort state.

        Re-selecting the active column flips its direction; any other column
        becomes active in its default direction. Attribute names resolve to
        their column key ("status_code" selects "statusCode"). Unknown keys
        are accepted and leave row order unchanged.

        Returns:
            The new SortSpec
        """
        field = self._fields.get(key)
        if field is not MISSING_FIELD:
            key = field.key
        self._sort = self._sort.toggled(key, field)
        return self._sort

    def project(self) -> list:
        """Returns the visible rows: the filtered snapshot in sort order."""
        return sort_rows(filter_rows(self._rows, self._filter), self._sort, self._fields)

    def count(self) -> int:
        """Number of visible rows."""
        return len(filter_rows(self._rows, self._filter))

    def count_label(self, noun: str = "cities") -> str:
        return f"{self.count()} {noun}"

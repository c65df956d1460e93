"""
Field descriptor module for the Air Quality Dashboard.

Table rows are never indexed with free-form strings. Each sortable/filterable
column is described by a Field: its key, the attribute holding the value, and
the FieldKind that decides how values are read and compared. Unknown keys
resolve to MISSING_FIELD, which compares every row as equal.
"""

import locale
import logging
import math
import unicodedata
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)


class FieldKind(Enum):
    """Comparison strategy of a field."""

    TEXT = "text"
    NUMBER = "number"
    TIMESTAMP = "timestamp"
    MISSING = "missing"


def coerce_number(value: Any) -> Optional[float]:
    """
    Reads a numeric value, tolerating strings and missing data.

    Args:
        value: Raw value from a JSON payload

    Returns:
        The value as a float, or None if it is missing, boolean, or not a finite number
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_text(value: Any) -> str:
    """Reads a string value; None becomes "" and other scalars are stringified."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def parse_instant(value: Any) -> Optional[float]:
    """
    Parses an ISO-8601 timestamp (or datetime) to POSIX seconds.

    Naive timestamps are read as UTC. Unparseable values return None.
    """
    if not isinstance(value, (str, datetime)) or value == "":
        return None
    try:
        instant = pd.to_datetime(value, utc=True, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if instant is None or pd.isna(instant):
        return None
    return instant.timestamp()


def _fold(text: str) -> str:
    # NFKD splits accented letters into base letter + combining mark
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _text_sort_key(value: Any) -> tuple[str, str]:
    """
    Case-insensitive collation key.

    Letters compare by their base form first, so "Évian" sorts between
    "Berlin" and "Frankfurt"; the locale transform of the casefolded text
    breaks ties between accented and plain spellings.
    """
    text = coerce_text(value).casefold()
    # strxfrm rejects embedded NUL characters
    return (_fold(text), locale.strxfrm(text.replace("\x00", "")))


@dataclass(frozen=True)
class Field:
    """
    Descriptor for one table column.

    Attributes:
        key: Column key as used by the view and the JSON payload (e.g. "statusCode")
        kind: How values are compared
        attribute: Row attribute name; defaults to key
    """

    key: str
    kind: FieldKind
    attribute: Optional[str] = None

    @property
    def attr_name(self) -> str:
        return self.attribute or self.key

    def value_of(self, row: Any) -> Any:
        """
        Reads the raw field value from a row.

        Rows may be dataclass instances or plain mappings straight from JSON.
        A missing value is returned as None.
        """
        if self.kind is FieldKind.MISSING:
            return None
        if isinstance(row, Mapping):
            if self.key in row:
                return row[self.key]
            return row.get(self.attr_name)
        return getattr(row, self.attr_name, None)

    def text_of(self, row: Any) -> str:
        """Returns the field value as a string for filtering."""
        return coerce_text(self.value_of(row))

    def sort_key(self, row: Any) -> Union[tuple[str, str], float]:
        """
        Computes the comparison key of a row for this field.

        TEXT compares case-insensitively with accented letters next to their
        base letter. NUMBER compares numerically with missing values read as
        0. TIMESTAMP compares
        by absolute instant with unparseable values read as 0. MISSING is
        constant, so all rows compare equal.
        """
        if self.kind is FieldKind.TEXT:
            return _text_sort_key(self.value_of(row))
        if self.kind is FieldKind.NUMBER:
            number = coerce_number(self.value_of(row))
            return number if number is not None else 0.0
        if self.kind is FieldKind.TIMESTAMP:
            instant = parse_instant(self.value_of(row))
            return instant if instant is not None else 0.0
        return 0.0


MISSING_FIELD = Field("", FieldKind.MISSING)


class FieldRegistry:
    """Known fields of one table view, looked up by key or attribute name."""

    def __init__(self, fields: Iterable[Field]):
        self._fields = tuple(fields)
        self._by_name = {}
        for field in self._fields:
            self._by_name[field.key] = field
            self._by_name[field.attr_name] = field

    def get(self, key: Optional[str]) -> Field:
        """Resolves a key; unknown keys resolve to MISSING_FIELD."""
        if key is None:
            return MISSING_FIELD
        field = self._by_name.get(key)
        if field is None:
            logger.debug("Unknown field key %r treated as missing", key)
            return MISSING_FIELD
        return field

    def select(self, keys: Iterable[str]) -> tuple:
        """Resolves several keys, dropping unknown ones."""
        return tuple(self._by_name[key] for key in keys if key in self._by_name)

    def keys(self) -> tuple:
        return tuple(field.key for field in self._fields)

    def __contains__(self, key: object) -> bool:
        return key in self._by_name

    def __iter__(self):
        return iter(self._fields)


CITY_FIELDS = FieldRegistry([
    Field("city", FieldKind.TEXT),
    Field("country", FieldKind.TEXT),
    Field("aqi", FieldKind.NUMBER),
    Field("pm25", FieldKind.NUMBER),
    Field("pm10", FieldKind.NUMBER),
])

TIMELINE_FIELDS = FieldRegistry([
    Field("timestamp", FieldKind.TIMESTAMP),
    Field("endpoint", FieldKind.TEXT),
    Field("method", FieldKind.TEXT),
    Field("statusCode", FieldKind.NUMBER, attribute="status_code"),
    Field("responseTime", FieldKind.NUMBER, attribute="response_time"),
])

"""
Filter specification module for the Air Quality Dashboard.

This module defines the FilterSpec, a single case-insensitive substring
predicate applied across a fixed set of text fields.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .fields import Field, coerce_text


@dataclass(frozen=True)
class FilterSpec:
    """
    Free-text filter of a table view.

    A row matches if the text occurs, ignoring case, in at least one of the
    fields. Empty text matches every row. A view with no filter fields only
    ever matches with empty text.

    Attributes:
        text: Search text as typed
        fields: Fields searched (OR-combined)
    """

    text: str = ""
    fields: tuple[Field, ...] = ()

    @property
    def needle(self) -> str:
        return self.text.casefold()

    @property
    def is_empty(self) -> bool:
        return self.text == ""

    def with_text(self, text: Optional[str]) -> "FilterSpec":
        """Returns a copy searching for new text; None is treated as ""."""
        return FilterSpec(coerce_text(text), self.fields)

    def matches(self, row: Any) -> bool:
        if self.is_empty:
            return True
        needle = self.needle
        return any(needle in field.text_of(row).casefold() for field in self.fields)

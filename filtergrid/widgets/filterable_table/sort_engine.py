#!/usr/bin/env python3
"""
Sort Engine - Single-column, type-aware row ordering

Numbers compare as numbers, booleans as False < True, everything else as
lowercase strings under the current locale's collation.
"""

from functools import cmp_to_key
from numbers import Number
from typing import Any, List, Optional, Sequence, Union

from PyQt6.QtCore import QCollator

from .table_types import Row, SortDirection, SortState

SortValue = Union[str, int, float, bool]

_collator: Optional[QCollator] = None


def _get_collator() -> QCollator:
    global _collator
    if _collator is None:
        _collator = QCollator()
    return _collator


def raw_value(row: Row, column: str) -> SortValue:
    """Comparison value of a cell: numbers and booleans as is, else a string"""
    value = row.get(column)
    if value is None:
        return ""
    if isinstance(value, (bool, Number)):
        return value
    return str(value)


def _as_text(value: SortValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def compare_values(a: SortValue, b: SortValue) -> int:
    """Three-way comparison used for ascending order"""
    # bool is a subclass of int, so check it first
    if isinstance(a, bool) and isinstance(b, bool):
        return (a > b) - (a < b)
    if (isinstance(a, Number) and not isinstance(a, bool)
            and isinstance(b, Number) and not isinstance(b, bool)):
        return (a > b) - (a < b)

    result = _get_collator().compare(_as_text(a).lower(), _as_text(b).lower())
    return (result > 0) - (result < 0)


def sort_rows(rows: Sequence[Row], sort_state: SortState) -> List[Row]:
    """Return a sorted copy of rows; ties keep their input order"""
    if sort_state.column is None or sort_state.direction is None:
        return list(rows)

    column = sort_state.column

    def compare(a: Row, b: Row) -> int:
        return compare_values(raw_value(a, column), raw_value(b, column))

    # reverse=True keeps ties in input order as well
    return sorted(rows, key=cmp_to_key(compare), reverse=sort_state.direction is SortDirection.DESC)


def next_sort_state(current: SortState, column: str) -> SortState:
    """Header click cycle: unsorted -> asc -> desc -> unsorted.

    Clicking a different column always starts it at ascending.
    """
    if current.column != column:
        return SortState(column, SortDirection.ASC)
    if current.direction is SortDirection.ASC:
        return SortState(column, SortDirection.DESC)
    if current.direction is SortDirection.DESC:
        return SortState.unsorted()
    return SortState(column, SortDirection.ASC)


def sort_state_from(column: Optional[str], direction: Any) -> SortState:
    """Build a SortState from loose inputs such as ("name", "desc")"""
    if column is None or direction is None:
        return SortState.unsorted()
    if not isinstance(direction, SortDirection):
        direction = SortDirection(str(direction).lower())
    return SortState(column, direction)

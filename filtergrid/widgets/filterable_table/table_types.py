#!/usr/bin/env python3
"""
Table Types - Data model for the filterable table

Filter tree nodes, column definitions and sort state. Rows themselves are
plain dictionaries and are never wrapped.
"""

import secrets
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from filtergrid.utils.errors import InvalidFilterTreeError


Row = Dict[str, Any]

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_LENGTH = 9


def generate_id() -> str:
    """Return a 9 character base-36 id from the system CSPRNG"""
    return ''.join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


class FilterOperator(Enum):
    """Boolean operator of a filter group"""
    AND = "AND"
    OR = "OR"

    def toggled(self) -> "FilterOperator":
        return FilterOperator.OR if self is FilterOperator.AND else FilterOperator.AND


class SortDirection(Enum):
    """Direction of the active sort"""
    ASC = "asc"
    DESC = "desc"


class ExportDataType(Enum):
    """Which rows a CSV export covers"""
    VISIBLE = "visible"
    ALL = "all"


class ColumnAlign(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass
class FilterCondition:
    """Leaf filter node: regex match against one column's value"""
    id: str = field(default_factory=generate_id)
    column: str = ""
    pattern: str = ""
    case_sensitive: bool = False
    type: str = field(default="condition", init=False)


@dataclass
class FilterGroup:
    """Interior filter node combining its children with AND/OR"""
    id: str = field(default_factory=generate_id)
    operator: FilterOperator = FilterOperator.AND
    children: List["FilterNode"] = field(default_factory=list)
    type: str = field(default="group", init=False)


FilterNode = Union[FilterCondition, FilterGroup]


def create_default_filter(default_column: str = "") -> FilterGroup:
    """Root filter: an AND group holding one empty condition"""
    return FilterGroup(
        operator=FilterOperator.AND,
        children=[FilterCondition(column=default_column)],
    )


def copy_node(node: FilterNode) -> FilterNode:
    """Deep copy of a filter subtree; ids are kept."""
    if isinstance(node, FilterCondition):
        return FilterCondition(
            id=node.id,
            column=node.column,
            pattern=node.pattern,
            case_sensitive=node.case_sensitive,
        )
    if isinstance(node, FilterGroup):
        return FilterGroup(
            id=node.id,
            operator=node.operator,
            children=[copy_node(child) for child in node.children],
        )
    raise InvalidFilterTreeError(f"Unknown filter node: {node!r}")


def iter_nodes(node: FilterNode):
    """Yield every node of a subtree, parents before children"""
    yield node
    if isinstance(node, FilterGroup):
        for child in node.children:
            yield from iter_nodes(child)
    elif not isinstance(node, FilterCondition):
        raise InvalidFilterTreeError(f"Unknown filter node: {node!r}")


@dataclass(frozen=True)
class SortState:
    """Active sort column and direction; both set or both None"""
    column: Optional[str] = None
    direction: Optional[SortDirection] = None

    def __post_init__(self):
        if (self.column is None) != (self.direction is None):
            raise ValueError("SortState column and direction must both be set or both be None")

    @property
    def is_sorted(self) -> bool:
        return self.column is not None

    @classmethod
    def unsorted(cls) -> "SortState":
        return cls()


@dataclass
class ColumnDefinition:
    """Schema entry describing one displayable column"""
    key: str
    label: str
    width: Optional[str] = None  # CSS length, e.g. "150px" or "20%"
    min_width: Optional[str] = None
    align: Optional[ColumnAlign] = None
    sortable: bool = True
    resizable: bool = True
    render: Optional[Callable[[Any, Row, int], Any]] = None
    class_name: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.align, str):
            self.align = ColumnAlign(self.align)

#!/usr/bin/env python3
"""
Filter Tree - Editing, evaluation and serialization of filter expressions

A filter is a tree of AND/OR groups whose leaves match a regular expression
against one column of a row. Structural edits never mutate their input: each
edit returns a fresh copy of the group it touched. The values typed into a
condition (column, pattern, case flag) live in a FilterValueStore keyed by
node id and are merged back into the tree only when it is compiled.
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import yaml

from filtergrid.utils.errors import ConfigurationError, InvalidFilterTreeError
from filtergrid.utils.log import get_logger

from .table_types import (
    FilterCondition,
    FilterGroup,
    FilterNode,
    FilterOperator,
    Row,
    copy_node,
    generate_id,
    iter_nodes,
)

logger = get_logger("filter")

Predicate = Callable[[Row], bool]
ColumnOption = Dict[str, str]


def accept_all(row: Row) -> bool:
    """Predicate that excludes nothing"""
    return True


def reject_all(row: Row) -> bool:
    return False


@dataclass
class FilterValues:
    """Live editor values of one condition"""
    column: str = ""
    pattern: str = ""
    case_sensitive: bool = False


class FilterValueStore:
    """Identity-keyed side table of condition values.

    One store belongs to one editing session; it is never shared between
    tables.
    """

    def __init__(self):
        self._values: Dict[str, FilterValues] = {}

    def get(self, node_id: str, default_column: str = "", default_pattern: str = "",
            default_case_sensitive: bool = False) -> FilterValues:
        """Get values for a node, creating the entry from defaults if missing"""
        if node_id not in self._values:
            self._values[node_id] = FilterValues(default_column, default_pattern, default_case_sensitive)
        return self._values[node_id]

    def lookup(self, node_id: str) -> Optional[FilterValues]:
        """Get values for a node without creating an entry"""
        return self._values.get(node_id)

    def set(self, node_id: str, column: str, pattern: str, case_sensitive: bool = False) -> None:
        self._values[node_id] = FilterValues(column, pattern, case_sensitive)

    def update(self, node_id: str, column: Optional[str] = None, pattern: Optional[str] = None,
               case_sensitive: Optional[bool] = None) -> FilterValues:
        """Change some of a node's values, keeping the rest"""
        current = self._values.get(node_id, FilterValues())
        updated = FilterValues(
            column=current.column if column is None else column,
            pattern=current.pattern if pattern is None else pattern,
            case_sensitive=current.case_sensitive if case_sensitive is None else case_sensitive,
        )
        self._values[node_id] = updated
        return updated

    def discard(self, node_id: str) -> None:
        self._values.pop(node_id, None)

    def discard_subtree(self, node: FilterNode) -> None:
        """Drop the entries of every node in a subtree"""
        for item in iter_nodes(node):
            self.discard(item.id)

    def register_tree(self, node: FilterNode) -> None:
        """Seed entries for every condition of a tree from its structural values"""
        for item in iter_nodes(node):
            if isinstance(item, FilterCondition):
                self.get(item.id, item.column, item.pattern, item.case_sensitive)

    def ids(self) -> List[str]:
        return list(self._values)

    def clear(self) -> None:
        self._values.clear()

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._values

    def __len__(self) -> int:
        return len(self._values)


# --- Tree editing ---

def first_column(columns: Sequence[Union[ColumnOption, str]]) -> str:
    """Key of the first column option, or "" when there are none"""
    if not columns:
        return ""
    first = columns[0]
    if isinstance(first, dict):
        return first.get('value', "")
    return str(first)


def _require_group(node: FilterNode) -> FilterGroup:
    if not isinstance(node, FilterGroup):
        raise InvalidFilterTreeError(f"Expected a filter group, got {node!r}")
    return node


def add_condition(group: FilterGroup, columns: Sequence[Union[ColumnOption, str]] = (),
                  store: Optional[FilterValueStore] = None) -> FilterGroup:
    """Append a fresh empty condition; the column defaults to the first available one"""
    default_column = first_column(columns)
    condition = FilterCondition(column=default_column)
    if store is not None:
        store.set(condition.id, default_column, "", False)

    updated = copy_node(_require_group(group))
    updated.children.append(condition)
    return updated


def add_group(group: FilterGroup, columns: Sequence[Union[ColumnOption, str]] = (),
              store: Optional[FilterValueStore] = None) -> FilterGroup:
    """Append a nested AND group holding one fresh default condition"""
    default_column = first_column(columns)
    condition = FilterCondition(column=default_column)
    if store is not None:
        store.set(condition.id, default_column, "", False)

    updated = copy_node(_require_group(group))
    updated.children.append(FilterGroup(operator=FilterOperator.AND, children=[condition]))
    return updated


def remove_child(group: FilterGroup, index: int, store: Optional[FilterValueStore] = None) -> FilterGroup:
    """Delete the child at index, discarding store entries of the whole removed subtree"""
    group = _require_group(group)
    if not 0 <= index < len(group.children):
        raise IndexError(f"Child index {index} out of range for group {group.id}")

    if store is not None:
        store.discard_subtree(group.children[index])

    updated = copy_node(group)
    del updated.children[index]
    return updated


def toggle_operator(group: FilterGroup) -> FilterGroup:
    updated = copy_node(_require_group(group))
    updated.operator = updated.operator.toggled()
    return updated


def replace_child(group: FilterGroup, index: int, node: FilterNode) -> FilterGroup:
    """Swap in an updated child, e.g. when a nested group reports its own change"""
    group = _require_group(group)
    if not 0 <= index < len(group.children):
        raise IndexError(f"Child index {index} out of range for group {group.id}")

    updated = copy_node(group)
    updated.children[index] = copy_node(node)
    return updated


def find_path(root: FilterNode, node_id: str) -> Optional[List[int]]:
    """Child indexes leading from root to the node with node_id, or None"""
    if root.id == node_id:
        return []
    if isinstance(root, FilterGroup):
        for index, child in enumerate(root.children):
            sub_path = find_path(child, node_id)
            if sub_path is not None:
                return [index] + sub_path
    elif not isinstance(root, FilterCondition):
        raise InvalidFilterTreeError(f"Unknown filter node: {root!r}")
    return None


def find_node(root: FilterNode, node_id: str) -> Optional[FilterNode]:
    for node in iter_nodes(root):
        if node.id == node_id:
            return node
    return None


def node_at_path(root: FilterNode, path: Sequence[int]) -> FilterNode:
    node = root
    for index in path:
        node = _require_group(node).children[index]
    return node


def replace_at_path(root: FilterNode, path: Sequence[int], node: FilterNode) -> FilterNode:
    """Rebuild the spine from root down to path with node swapped in"""
    if not path:
        return copy_node(node)
    head, rest = path[0], path[1:]
    group = _require_group(root)
    return replace_child(group, head, replace_at_path(group.children[head], rest, node))


# --- Evaluation ---

def stringify_value(value: Any) -> str:
    """String form of a cell value as seen by filter patterns"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_filter_with_values(node: FilterNode, store: Optional[FilterValueStore] = None) -> FilterNode:
    """Snapshot of the tree with the store's live values merged in.

    Conditions without a store entry keep their structural values.
    """
    if isinstance(node, FilterCondition):
        values = store.lookup(node.id) if store is not None else None
        if values is None:
            return copy_node(node)
        return FilterCondition(
            id=node.id,
            column=values.column,
            pattern=values.pattern,
            case_sensitive=values.case_sensitive,
        )
    if isinstance(node, FilterGroup):
        return FilterGroup(
            id=node.id,
            operator=node.operator,
            children=[build_filter_with_values(child, store) for child in node.children],
        )
    raise InvalidFilterTreeError(f"Unknown filter node: {node!r}")


def _compile_condition(condition: FilterCondition) -> Predicate:
    if not condition.pattern:
        return accept_all

    flags = 0 if condition.case_sensitive else re.IGNORECASE
    try:
        regex = re.compile(condition.pattern, flags)
    except re.error as e:
        logger.debug("Invalid filter pattern %r on column %r: %s", condition.pattern, condition.column, e)
        return reject_all

    column = condition.column

    def matches(row: Row) -> bool:
        return regex.search(stringify_value(row.get(column))) is not None

    return matches


def _compile_node(node: FilterNode) -> Predicate:
    if isinstance(node, FilterCondition):
        return _compile_condition(node)
    if isinstance(node, FilterGroup):
        if not node.children:
            return accept_all
        children = tuple(_compile_node(child) for child in node.children)
        if node.operator is FilterOperator.AND:
            return lambda row: all(child(row) for child in children)
        if node.operator is FilterOperator.OR:
            return lambda row: any(child(row) for child in children)
        raise InvalidFilterTreeError(f"Unknown filter operator: {node.operator!r}")
    raise InvalidFilterTreeError(f"Unknown filter node: {node!r}")


def compile_filter(root: FilterNode, store: Optional[FilterValueStore] = None) -> Predicate:
    """Compile a filter tree into a row predicate.

    Patterns are compiled once here, not once per row.
    """
    return _compile_node(build_filter_with_values(root, store))


def filter_rows(rows: Sequence[Row], predicate: Predicate) -> List[Row]:
    return [row for row in rows if predicate(row)]


def count_conditions(root: FilterNode) -> Tuple[int, int]:
    """(total conditions, conditions with a non-empty pattern)"""
    total = active = 0
    for node in iter_nodes(root):
        if isinstance(node, FilterCondition):
            total += 1
            if node.pattern:
                active += 1
    return total, active


# --- Serialization ---

def filter_to_dict(node: FilterNode) -> Dict[str, Any]:
    """Plain-dict form of a filter tree"""
    if isinstance(node, FilterCondition):
        return {
            'id': node.id,
            'type': 'condition',
            'column': node.column,
            'regex': node.pattern,
            'caseSensitive': node.case_sensitive,
        }
    if isinstance(node, FilterGroup):
        return {
            'id': node.id,
            'type': 'group',
            'operator': node.operator.value,
            'children': [filter_to_dict(child) for child in node.children],
        }
    raise InvalidFilterTreeError(f"Unknown filter node: {node!r}")


def filter_from_dict(data: Dict[str, Any]) -> FilterNode:
    """Build a filter tree from its plain-dict form; missing ids are generated"""
    if not isinstance(data, dict):
        raise InvalidFilterTreeError(f"Filter node must be a mapping, got {type(data).__name__}")

    node_type = data.get('type')
    node_id = str(data.get('id') or generate_id())

    if node_type == 'condition':
        pattern = data.get('regex', data.get('pattern', ""))
        case_sensitive = data.get('caseSensitive', data.get('case_sensitive', False))
        return FilterCondition(
            id=node_id,
            column=str(data.get('column') or ""),
            pattern="" if pattern is None else str(pattern),
            case_sensitive=bool(case_sensitive),
        )

    if node_type == 'group':
        operator_name = str(data.get('operator', 'AND')).upper()
        try:
            operator = FilterOperator(operator_name)
        except ValueError:
            raise InvalidFilterTreeError(f"Unknown filter operator: {operator_name}")
        children = data.get('children') or []
        if not isinstance(children, list):
            raise InvalidFilterTreeError(f"Group {node_id} children must be a list")
        return FilterGroup(
            id=node_id,
            operator=operator,
            children=[filter_from_dict(child) for child in children],
        )

    raise InvalidFilterTreeError(f"Unknown filter node type: {node_type!r}")


def _check_unique_ids(root: FilterNode) -> None:
    seen = set()
    for node in iter_nodes(root):
        if node.id in seen:
            raise InvalidFilterTreeError(f"Duplicate filter node id: {node.id}")
        seen.add(node.id)


def load_filter_file(path: Union[str, Path]) -> FilterGroup:
    """Load a filter tree from a YAML or JSON file.

    A bare condition at the top level is wrapped in an AND root group.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Filter file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() == '.json':
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Invalid filter file {path}: {e}")

    root = filter_from_dict(data)
    if isinstance(root, FilterCondition):
        root = FilterGroup(operator=FilterOperator.AND, children=[root])
    _check_unique_ids(root)

    logger.info("Loaded filter from %s", path)
    return root

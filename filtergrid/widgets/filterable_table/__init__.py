#!/usr/bin/env python3
"""
Filterable Table Package - Filter, sort, resize and export tabular data

This package provides the data side of a filterable table: a recursive
filter expression editor and evaluator, a type-aware sort, two-column resize
and CSV export. Rendering is left to the view that connects to it.
"""

from .table_types import (
    ColumnAlign,
    ColumnDefinition,
    ExportDataType,
    FilterCondition,
    FilterGroup,
    FilterNode,
    FilterOperator,
    SortDirection,
    SortState,
    copy_node,
    create_default_filter,
    generate_id,
)

from .filter_tree import (
    FilterValues,
    FilterValueStore,
    add_condition,
    add_group,
    compile_filter,
    filter_from_dict,
    filter_to_dict,
    load_filter_file,
    remove_child,
    replace_child,
    toggle_operator,
)

from .filter_controller import (
    ApplyState,
    FilterController
)

from .sort_engine import (
    compare_values,
    next_sort_state,
    raw_value,
    sort_rows
)

from .column_resize import (
    ColumnResizer,
    can_resize,
    compute_resize
)

from .csv_export import (
    build_csv_content,
    export_file_name,
    format_cell,
    write_csv
)

from .table_model import FilterableTableModel

__all__ = [
    # Core components
    'FilterableTableModel',
    'ColumnDefinition',
    'ColumnAlign',
    'SortState',
    'SortDirection',
    'ExportDataType',

    # Filter components
    'FilterCondition',
    'FilterGroup',
    'FilterNode',
    'FilterOperator',
    'FilterValues',
    'FilterValueStore',
    'FilterController',
    'ApplyState',
    'add_condition',
    'add_group',
    'remove_child',
    'replace_child',
    'toggle_operator',
    'compile_filter',
    'filter_to_dict',
    'filter_from_dict',
    'load_filter_file',
    'create_default_filter',
    'copy_node',
    'generate_id',

    # Sort components
    'sort_rows',
    'raw_value',
    'compare_values',
    'next_sort_state',

    # Resize components
    'ColumnResizer',
    'can_resize',
    'compute_resize',

    # Export components
    'build_csv_content',
    'export_file_name',
    'format_cell',
    'write_csv'
]

# Version info
__version__ = '0.1.0'
__description__ = 'Filterable, sortable, resizable, exportable table data'
